"""
Snippet Manager Backend: Stores
===============================

Persistence contracts (`stores.base`) and their SQLAlchemy implementations.

Store Inventory:
    - UserStore    → SqlAlchemyUserStore    (users)
    - SnippetStore → SqlAlchemySnippetStore (snippets + tag associations)
    - TagStore     → SqlAlchemyTagStore     (explicit add/remove/list tag)
    - FolderStore  → SqlAlchemyFolderStore  (folders + folder contents)
"""

from snippet_manager.stores.base import FolderStore, SnippetStore, TagStore, UserStore
from snippet_manager.stores.folders import SqlAlchemyFolderStore
from snippet_manager.stores.snippets import SqlAlchemySnippetStore
from snippet_manager.stores.tags import SqlAlchemyTagStore, TagReconciler
from snippet_manager.stores.users import SqlAlchemyUserStore

__all__ = [
    "FolderStore",
    "SnippetStore",
    "SqlAlchemyFolderStore",
    "SqlAlchemySnippetStore",
    "SqlAlchemyTagStore",
    "SqlAlchemyUserStore",
    "TagReconciler",
    "TagStore",
    "UserStore",
]
