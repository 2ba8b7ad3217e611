"""AI Executor（AI 执行器）

提示词来自 inputMapping.prompt（可引用前序输出），缺省使用 config.prompt。
前序节点输出以 JSON 形式附在提示词后作为上下文：
- structuredOutput（默认）：按 config.outputSchema 生成 JSON 对象
- 否则：生成自由文本，输出 {"text": ...}
"""

import json
import logging

from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import NodeExecutionError
from src.domain.ports.llm_port import LLMPort
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutor
from src.domain.value_objects.node_config import AiNodeConfig

logger = logging.getLogger(__name__)

AI_EXECUTION_ERROR = "AI_EXECUTION_ERROR"


def build_prompt(prompt: str, context: list[dict], *, structured: bool) -> str:
    parts = [
        prompt,
        "Available data from previous steps:",
        json.dumps(context, indent=2, default=str),
    ]
    if structured:
        parts.append("Please provide the response according to the specified schema.")
    return "\n".join(parts)


class AiExecutor(NodeExecutor):
    def __init__(self, llm: LLMPort | None):
        self.llm = llm

    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        config = AiNodeConfig.model_validate(node.config)
        prompt = context.inputs.get("prompt") or config.prompt
        if not prompt or not isinstance(prompt, str):
            raise NodeExecutionError("AI node requires prompt", code=AI_EXECUTION_ERROR)
        if self.llm is None:
            raise NodeExecutionError("AI provider is not configured", code=AI_EXECUTION_ERROR)
        if config.mcp and config.mcp.url:
            logger.warning(
                "ai_node_mcp_tools_ignored",
                extra={"node_id": node.id, "mcp_url": config.mcp.url},
            )

        previous = [
            {"node": result.node_name or result.node_id, "output": result.output}
            for result in context.previous_results
        ]

        try:
            if config.structured_output:
                if not config.output_schema:
                    raise NodeExecutionError(
                        "AI node with structured output requires outputSchema in config",
                        code=AI_EXECUTION_ERROR,
                    )
                output = await self.llm.generate_object(
                    build_prompt(prompt, previous, structured=True), config.output_schema
                )
            else:
                text = await self.llm.generate_text(build_prompt(prompt, previous, structured=False))
                output = {"text": text}
        except NodeExecutionError:
            raise
        except Exception as e:
            raise NodeExecutionError(
                str(e) or type(e).__name__,
                code=AI_EXECUTION_ERROR,
                details={"type": type(e).__name__, "message": str(e)},
            ) from e

        return NodeResult.succeeded(
            node_id=node.id, node_name=node.name, input=context.inputs, output=output
        )
