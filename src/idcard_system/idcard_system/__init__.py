"""ID Card System package.

Feature modules (idcards, bulk_import, documents, users) sit on top of a thin
Flask controller layer and plain service/repository layers.
"""
