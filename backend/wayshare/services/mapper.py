"""
WayShare Backend - Entity Mapper
=================================

What:  Bidirectional projection between ORM records and transfer objects.
How:   One generic EntityMapper, parametrized per entity by:
         - the record class and the transfer-object class
         - the scalar field names (same attribute name on both sides)
         - the relationships, as {transfer field: foreign-key attribute}
Who:   Used by CrudService; the mapper instances live in wayshare.entities.

Contract:
    to_transfer(record)                 → transfer object
    to_record(transfer)                 → new, transient record
    apply_non_null_fields(transfer, r)  → r, with only non-null fields copied

    Mappers are pure: no session, no I/O, no validation. Relationships are
    mapped by identity only. A record's `ride_id = 5` becomes
    `ride = {"id": 5}` and back; the related row is never loaded.

Round-trip law:
    for every record r:  snapshot(to_record(to_transfer(r))) == snapshot(r)
"""

from typing import Any, Dict, Generic, Mapping, Optional, Sequence, Type, TypeVar

from pydantic.alias_generators import to_camel

from wayshare.schemas.common import EntityDTO, RefDTO

R = TypeVar("R")
D = TypeVar("D", bound=EntityDTO)


class EntityMapper(Generic[R, D]):
    """
    Stateless mapper for one entity type.

    Example:
        RIDE_MAPPER = EntityMapper(
            Ride, RideDTO,
            fields=("start_location", "end_location", "start_time", "end_time", "is_recurring"),
            references={"member": "member_id"},
        )
    """

    def __init__(
        self,
        record_class: Type[R],
        transfer_class: Type[D],
        fields: Sequence[str],
        references: Optional[Mapping[str, str]] = None,
    ):
        self.record_class = record_class
        self.transfer_class = transfer_class
        self.fields = tuple(fields)
        self.references = dict(references or {})

    # ── Record → Transfer ─────────────────────────────────────────────────

    def to_transfer(self, record: R) -> D:
        values: Dict[str, Any] = {"id": record.id}
        for name in self.fields:
            values[name] = getattr(record, name)
        for name, fk in self.references.items():
            key = getattr(record, fk)
            values[name] = RefDTO.model_construct(id=key) if key is not None else None
        # model_construct: records are trusted, the mapper never validates
        return self.transfer_class.model_construct(**values)

    # ── Transfer → Record ─────────────────────────────────────────────────

    def to_record(self, transfer: D) -> R:
        values: Dict[str, Any] = {"id": transfer.id}
        for name in self.fields:
            values[name] = getattr(transfer, name, None)
        for name, fk in self.references.items():
            ref = getattr(transfer, name, None)
            values[fk] = ref.id if ref is not None else None
        return self.record_class(**values)

    def apply_non_null_fields(self, transfer: EntityDTO, record: R) -> R:
        """
        Merge-patch: copy every non-null field of `transfer` onto `record`.

        Fields that are absent or null in the transfer object leave the
        record untouched; there is no way to clear a field through a patch.
        The id is never copied.
        """
        for name in self.fields:
            value = getattr(transfer, name, None)
            if value is not None:
                setattr(record, name, value)
        for name, fk in self.references.items():
            ref = getattr(transfer, name, None)
            if ref is not None:
                setattr(record, fk, ref.id)
        return record

    # ── Helpers ───────────────────────────────────────────────────────────

    def snapshot(self, record: R) -> Dict[str, Any]:
        """Every mapped column value of `record`, keyed by attribute name."""
        values = {"id": record.id}
        for name in self.fields:
            values[name] = getattr(record, name)
        for fk in self.references.values():
            values[fk] = getattr(record, fk)
        return values

    def sort_attribute(self, wire_name: str) -> Optional[str]:
        """
        Resolve a sort field as sent by clients to a record attribute.

        Accepts "id", camelCase field names ("startTime"), snake_case field
        names, and relationship keys ("member" or "member.id").
        """
        if wire_name == "id":
            return "id"
        for name in self.fields:
            if wire_name in (name, to_camel(name)):
                return name
        ref_name = wire_name[:-3] if wire_name.endswith(".id") else wire_name
        for name, fk in self.references.items():
            if ref_name == name:
                return fk
        return None
