"""Tillbook - restaurant back-office ledger."""

__version__ = "0.1.0"


# Import main lazily so the domain and database layers load without click
def __getattr__(name):
    if name == "main":
        from tillbook.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
