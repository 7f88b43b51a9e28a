from notedesk.actions.bus import Action, ActionBus, ActionDispatchError, ActionHandler

__all__ = ["Action", "ActionBus", "ActionDispatchError", "ActionHandler"]
