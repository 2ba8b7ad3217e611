"""应用层 - 用例编排、事务边界

Application 层职责：
1. 用例编排：协调 Domain 实体、Repository、Domain Service
2. 运行编排：持久化步骤运行时、运行编排器、后台派发
3. 输入输出转换：接收输入参数，返回领域实体

设计原则：
- 依赖倒置：依赖 Port 接口，不依赖具体实现
- 可测试性：使用内存 Repository / Fake 客户端进行单元测试
- 无 Web 框架依赖：不依赖 FastAPI
"""
