"""Public schema exports."""

from .paycor import PaycorUser

__all__ = ["PaycorUser"]
