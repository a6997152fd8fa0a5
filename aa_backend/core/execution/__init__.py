"""
UserOperation Execution Layer

- userop: UserOperation / receipt models and wire serialization
- smart_account: the Smart Account SDK calls the flow relies on
- service: sponsor / submit / get_receipt, in-process via the providers
- flow: UserOperationFlow, the sponsor -> sign -> submit -> poll state machine

Usage:
    from aa_backend.core.execution.flow import UserOperationFlow
    from aa_backend.core.execution.service import ProviderUserOperationService

    flow = UserOperationFlow(
        account=smart_account,
        service=ProviderUserOperationService(bundler, paymaster),
        chain_id=1946,
    )
    result = await flow.run()
"""
