"""领域层 Ports - 定义领域层需要的外部依赖接口

- 仓储：Workflow / WorkflowRun / WorkflowEvent / WorkflowSession
- 外部服务：IntegrationClient、LLMPort
- 执行：NodeExecutor、StepResultStore
"""
