from .close_counter import close_counter
from .decrement import decrement
from .increment import increment
from .initialize_counter import initialize_counter

__all__ = ["initialize_counter", "increment", "decrement", "close_counter"]
