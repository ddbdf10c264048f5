from xltools.config.settings import Settings

__all__ = ["Settings"]
