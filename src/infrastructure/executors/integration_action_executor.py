"""Integration Action Executor（集成动作执行器）

通过集成平台执行 config.actionId 指定的动作，输入为 inputMapping 解析结果。
"""

from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import IntegrationError, NodeExecutionError
from src.domain.ports.integration_client import IntegrationClientFactory
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutor
from src.domain.value_objects.node_config import ActionNodeConfig

ACTION_EXECUTION_ERROR = "ACTION_EXECUTION_ERROR"


class IntegrationActionExecutor(NodeExecutor):
    def __init__(self, client_factory: IntegrationClientFactory):
        self.client_factory = client_factory

    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        config = ActionNodeConfig.model_validate(node.config)
        if not config.action_id:
            raise NodeExecutionError(
                "Action node requires actionId in config", code=ACTION_EXECUTION_ERROR
            )

        client = self.client_factory(context.access_token)
        try:
            output = await client.run_action(
                config.action_id, context.inputs, connection_id=config.connection_id
            )
        except IntegrationError as e:
            raise NodeExecutionError(
                str(e),
                code=ACTION_EXECUTION_ERROR,
                details={"actionId": config.action_id, "statusCode": e.status_code},
            ) from e

        return NodeResult.succeeded(
            node_id=node.id, node_name=node.name, input=context.inputs, output=output
        )
