# safecheck/agents: timer, dispatcher, notifier and scheduler agents
