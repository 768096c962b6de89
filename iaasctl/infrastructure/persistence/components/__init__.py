from .document_file import JSONDocumentFile

__all__ = ["JSONDocumentFile"]
