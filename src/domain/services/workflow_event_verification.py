"""工作流事件校验哈希

事件发送方在事件的 headers 中携带 x-workflow-event-verification-hash，
值为 HMAC-SHA256(secret, workflowId) 的十六进制摘要。接入网关重新计算并做常量时间比较。
"""

import hashlib
import hmac

WORKFLOW_EVENT_VERIFICATION_HASH_HEADER = "x-workflow-event-verification-hash"


def generate_verification_hash(workflow_id: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), workflow_id.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_verification_hash(workflow_id: str, verification_hash: str, secret: str) -> bool:
    """常量时间比较；长度不同或非 ASCII 输入直接判为不匹配"""
    expected = generate_verification_hash(workflow_id, secret)
    try:
        return hmac.compare_digest(verification_hash.encode("ascii"), expected.encode("ascii"))
    except UnicodeEncodeError:
        return False


def build_event_ingest_url(host_name: str, workflow_id: str) -> str:
    """事件发送方应调用的接入地址"""
    return f"https://{host_name}/api/workflows/{workflow_id}/ingest-event"


def build_event_headers(workflow_id: str, secret: str) -> dict[str, str]:
    """事件发送方需要附带在事件 headers 中的校验头"""
    return {WORKFLOW_EVENT_VERIFICATION_HASH_HEADER: generate_verification_hash(workflow_id, secret)}
