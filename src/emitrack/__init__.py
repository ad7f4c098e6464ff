# Import main lazily to avoid circular dependencies
def __getattr__(name):
    if name == "main":
        from emitrack.cli.main import main
        return main
    if name == "create_app":
        from emitrack.api.app import create_app
        return create_app
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
