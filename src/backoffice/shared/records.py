"""Repository helpers shared by command handlers, queries and presenters.

Protean query sets cap ``all()`` at a default page size, so every read that
must see the whole table walks it in fixed-size batches.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.reflection import id_field

_BATCH_SIZE = 500


def fetch_all(element_cls, **filters) -> list:
    """Every record of ``element_cls`` matching ``filters``, in identifier order."""
    dao = current_domain.repository_for(element_cls)._dao
    key = id_field(element_cls).field_name
    records = []
    offset = 0
    while True:
        query = dao.query.filter(**filters) if filters else dao.query
        items = query.order_by(key).offset(offset).limit(_BATCH_SIZE).all().items
        records.extend(items)
        if len(items) < _BATCH_SIZE:
            return records
        offset += _BATCH_SIZE


def fetch_first(element_cls, **filters):
    """The first record matching ``filters``, or ``None``."""
    dao = current_domain.repository_for(element_cls)._dao
    items = dao.query.filter(**filters).limit(1).all().items
    return items[0] if items else None


def fetch_by_id(element_cls, identifier):
    """Load by identifier, returning ``None`` for unknown or blank ids."""
    if not identifier:
        return None
    try:
        return current_domain.repository_for(element_cls).get(str(identifier))
    except ObjectNotFoundError:
        return None


def count(element_cls, **filters) -> int:
    dao = current_domain.repository_for(element_cls)._dao
    query = dao.query.filter(**filters) if filters else dao.query
    return query.all().total


def delete(record) -> None:
    current_domain.repository_for(type(record))._dao.delete(record)
