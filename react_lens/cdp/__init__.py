from .channel import RuntimeChannel

__all__ = ['RuntimeChannel']
