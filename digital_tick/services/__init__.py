"""Services for usage metering, conversation history and completions.

Services are organized into:
- core/: Business logic (usage ledger, conversation store, quota policy, chat orchestration)
- providers/: External completion API wrappers
- prompts/: System prompt text
- utils/: Internal utilities (identity, accounting period, snapshot documents)
"""
