"""
Namespace Layer - resolve namespace requests and read across namespaces.
"""

from overcontext.namespace.multi_context import LocatedEntity, MultiNamespaceContext
from overcontext.namespace.resolver import NamespaceResolver

__all__ = [
    "LocatedEntity",
    "MultiNamespaceContext",
    "NamespaceResolver",
]
