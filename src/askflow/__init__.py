"""askflow: ask a question, wait for the reply across turns, validate it,
then run a chain of handlers on the accepted value."""

__version__ = "0.1.0"
