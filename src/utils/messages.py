from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Posted at App level by the cart engine's change subscription.
    The app bumps cart_version, which the cart screen and sidebar watch.
    """

    bubble = True


class ProductsChangedMessage(Message):
    """
    Posted at App level after the product store was written to.
    The app reloads the session, then bumps products_version.
    """

    bubble = True


class NewOrderMessage(Message):
    """
    Fired when an order record was saved at checkout.
    Bumps orders_version, watched by the analytics screen.
    """

    bubble = True


class LanguageChangedMessage(Message):
    bubble = True

    def __init__(self, lang: str) -> None:
        super().__init__()
        self.lang = lang


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
