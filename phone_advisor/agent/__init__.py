from phone_advisor.agent.engine import DecisionEngine

__all__ = ["DecisionEngine"]
