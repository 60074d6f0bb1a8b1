"""
Append-only audit trail plumbing.

Order history rows and both stock ledgers' transaction rows are immutable
records written in the same unit of work as the state change they describe.
``AppendOnlyRecord`` refuses updates and deletes; ``append_record`` refuses to
write outside an atomic block.
"""
from django.db import models, transaction


class ImmutableRecordError(Exception):
    pass


class AppendOnlyRecord(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(f"{type(self).__name__} rows are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(f"{type(self).__name__} rows are append-only")

    class Meta:
        abstract = True


def append_record(record_model, **fields):
    """Insert one immutable record; the caller's transaction owns it."""
    if not issubclass(record_model, AppendOnlyRecord):
        raise TypeError(f"{record_model.__name__} is not an append-only record")
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError(
            f"{record_model.__name__} must be written inside the transaction that changes its aggregate"
        )
    return record_model.objects.create(**fields)
