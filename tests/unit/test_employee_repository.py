"""FirestoreEmployeeRepository: owner-namespace search and profile writes."""

from controlplus.infrastructure.firebase.repositories import FirestoreEmployeeRepository
from tests.fakes import InMemoryFirestore, seed_technician


async def test_group_search_closes_stream_after_first_match(store: InMemoryFirestore) -> None:
    seed_technician(store, "o1", "t1", profile=False, flat=False)
    store.seed("users/o2/employees/t1", {"uid": "t1", "adminId": "o2"})

    record = await FirestoreEmployeeRepository(store).find_in_owner_namespaces("t1")

    assert record.admin_id == "o1"
    assert store.open_streams == 0


async def test_merge_profile_writes_an_employee_profile(store: InMemoryFirestore) -> None:
    await FirestoreEmployeeRepository(store).merge_profile(
        "t1", {"phone": "1199", "initialPassword": "segredo1"}, admin_id="o1"
    )
    assert store.docs["users/t1"] == {"phone": "1199", "uid": "t1", "role": "employee", "adminId": "o1"}
