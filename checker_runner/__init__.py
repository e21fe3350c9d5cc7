"""checker-runner: plan and run Checker Framework analysis for Maven projects."""

__version__ = "0.1.0"
