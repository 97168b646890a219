from .file_loader import FileLoader, MappingRequest

__all__ = ["FileLoader", "MappingRequest"]
