"""Business logic services.

Modules are imported directly (``from pagekit.services import normalizer``)
rather than re-exported here, because the repositories depend on the
normalizer and the resolver depends on the repositories.
"""
