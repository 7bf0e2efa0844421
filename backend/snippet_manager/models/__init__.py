"""
Snippet Manager Backend: ORM Models
===================================

Five tables: users, snippets, tags, snippet_tags (join) and folders.
Importing this package registers all of them with `Base.metadata`.
"""

from snippet_manager.models.folder import Folder
from snippet_manager.models.snippet import Snippet
from snippet_manager.models.tag import Tag, snippet_tags
from snippet_manager.models.user import User

__all__ = ["Folder", "Snippet", "Tag", "User", "snippet_tags"]
