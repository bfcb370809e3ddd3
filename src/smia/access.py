"""
Partition browsing access control.

The decision depends on the partition's current mount state, so it is
evaluated per request and never cached.
"""

from typing import Iterable

from smia.models import Disk, Partition, Session


def has_access(session: Session, partition: Partition) -> bool:
    """
    Decide whether ``session`` may browse ``partition``.

    Root may browse anything; unmounted partitions are never browsable by
    anyone else; otherwise only the partition a logged-in session is bound to.
    """
    if session.is_root:
        return True
    if not partition.is_mounted:
        return False
    return session.is_logged_in and partition.id == session.partition_id


def accessible_partitions(session: Session, disks: Iterable[Disk]) -> list[Partition]:
    """Partitions from a disk snapshot that ``session`` may browse."""
    return [p for disk in disks for p in disk.partitions if has_access(session, p)]


def find_partition(disks: Iterable[Disk], partition_id: str) -> Partition | None:
    """Look up a partition by id in a disk snapshot."""
    for disk in disks:
        for partition in disk.partitions:
            if partition.id == partition_id:
                return partition
    return None
