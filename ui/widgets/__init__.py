from ui.widgets.typing_area import Caret, TypingArea

__all__ = ["Caret", "TypingArea"]
