from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired once a session exists, so screens can refresh the sidebar
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired by the shop whenever an item is added or removed.
    """

    bubble = True


class OrdersChangedMessage(Message):
    """
    Fired after checkout or an admin status update.
    Listened to by the account and dashboard screens.
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
