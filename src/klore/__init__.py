"""klore - turn a project into a reusable, parameterized template."""

__version__ = "0.1.0"
