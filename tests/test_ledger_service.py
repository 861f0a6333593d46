import pytest

from app.core.errors import NotFound, Unauthenticated, ValidationError

ALICE = "user-alice"
BOB = "user-bob"


def add(service, owner=ALICE, **fields):
    data = {"type": "expense", "category": "Food", "amount": 10, "date": "2024-05-10"}
    data.update(fields)
    return service.create(data, owner)


def test_create_assigns_id_and_defaults(service):
    created = service.create({"type": "income", "category": "  Salary ", "amount": 1000, "note": "   "}, ALICE)

    assert created["id"]
    assert created["created_at"]
    assert created["user_id"] == ALICE
    assert created["category"] == "Salary"
    assert created["note"] is None
    assert created["date"] == "2024-05-15"


@pytest.mark.parametrize(
    "data, message",
    [
        ({"type": "transfer", "category": "Food", "amount": 5}, 'Type must be either "income" or "expense"'),
        ({"type": "expense", "category": "Food", "amount": 0}, "Amount must be a positive number"),
        ({"type": "expense", "category": "Food", "amount": -3}, "Amount must be a positive number"),
        ({"type": "expense", "category": "Food", "amount": "12"}, "Amount must be a positive number"),
        ({"type": "expense", "category": "Food", "amount": float("nan")}, "Amount must be a positive number"),
        ({"type": "expense", "category": "Food", "amount": 1e300}, "Amount must be a positive number"),
        ({"type": "expense", "category": "Food", "amount": 1e-200}, "Amount must be a positive number"),
        ({"type": "expense", "category": "Food", "amount": 10**130}, "Amount must be a positive number"),
        ({"type": "expense", "category": "   ", "amount": 5}, "Category must be a non-empty string"),
        ({"type": "expense", "amount": 5}, "Missing required fields: category"),
    ],
)
def test_create_validation(service, store, data, message):
    with pytest.raises(ValidationError) as exc_info:
        service.create(data, ALICE)
    assert exc_info.value.message == message
    assert store.items == {}


def test_create_requires_owner(service):
    with pytest.raises(Unauthenticated):
        add(service, owner="")


def test_read_round_trip_and_owner_isolation(service):
    created = add(service)

    assert service.read(created["id"], ALICE) == created
    with pytest.raises(NotFound):
        service.read(created["id"], BOB)
    with pytest.raises(NotFound):
        service.read("missing", ALICE)


def test_create_returns_numbers_as_read_back(service):
    created = add(service, amount=30.0)
    read = service.read(created["id"], ALICE)

    assert created == read
    assert type(created["amount"]) is type(read["amount"]) is int


def test_update_writes_only_patched_fields(service):
    created = add(service, note="lunch")
    updated = service.update(created["id"], {"amount": 12.5, "category": " Dining "}, ALICE)

    assert updated["amount"] == 12.5
    assert updated["category"] == "Dining"
    assert updated["note"] == "lunch"
    assert updated["date"] == created["date"]


def test_update_empty_patch_is_noop(service):
    created = add(service)
    assert service.update(created["id"], {}, ALICE) == created


def test_update_is_idempotent(service):
    created = add(service)
    first = service.update(created["id"], {"type": "income", "date": "2024-05-01"}, ALICE)
    second = service.update(created["id"], {"type": "income", "date": "2024-05-01"}, ALICE)
    assert first == second
    assert second["date"] == "2024-05-01"


def test_update_validates_present_fields(service):
    created = add(service)
    with pytest.raises(ValidationError):
        service.update(created["id"], {"amount": -1}, ALICE)
    with pytest.raises(ValidationError):
        service.update(created["id"], {"amount": 1e300}, ALICE)
    with pytest.raises(ValidationError):
        service.update(created["id"], {"category": None}, ALICE)
    assert service.read(created["id"], ALICE) == created


def test_update_other_owner_is_not_found(service):
    created = add(service)
    with pytest.raises(NotFound):
        service.update(created["id"], {"amount": 99}, BOB)
    assert service.read(created["id"], ALICE)["amount"] == 10


def test_delete_then_read_and_delete_again(service):
    created = add(service)
    service.delete(created["id"], ALICE)

    with pytest.raises(NotFound):
        service.read(created["id"], ALICE)
    with pytest.raises(NotFound):
        service.delete(created["id"], ALICE)


def test_delete_other_owner_is_not_found(service):
    created = add(service)
    with pytest.raises(NotFound):
        service.delete(created["id"], BOB)
    assert service.read(created["id"], ALICE)


def test_list_filters_and_ordering(service):
    add(service, date="2024-05-01")
    add(service, date="2024-05-03", type="income", category="Salary")
    add(service, date="2024-05-02", category="Travel")
    add(service, owner=BOB, date="2024-05-04")

    assert [t["date"] for t in service.list(ALICE)] == ["2024-05-03", "2024-05-02", "2024-05-01"]
    assert [t["category"] for t in service.list(ALICE, {"type": "expense"})] == ["Travel", "Food"]
    assert len(service.list(ALICE, {"category": "Salary"})) == 1
    assert len(service.list(ALICE, {"category": " Salary "})) == 1
    assert [t["date"] for t in service.list(ALICE, {"startDate": "2024-05-02", "endDate": "2024-05-02"})] == [
        "2024-05-02"
    ]


def test_list_pagination(service):
    for day in range(1, 16):
        add(service, date=f"2024-05-{day:02d}")

    assert len(service.list(ALICE, {"limit": "3"})) == 3
    assert [t["date"] for t in service.list(ALICE, {"limit": 2, "offset": 1})] == ["2024-05-14", "2024-05-13"]

    # offset without limit uses the default page size
    page = service.list(ALICE, {"offset": "2"})
    assert len(page) == 10
    assert page[0]["date"] == "2024-05-13"


@pytest.mark.parametrize("params", [{"limit": "0"}, {"offset": "-1"}, {"limit": "ten"}, {"type": "loan"}])
def test_list_rejects_bad_params(service, params):
    with pytest.raises(ValidationError):
        service.list(ALICE, params)


def test_spending_summary_example(service):
    add(service, type="expense", category="Food", amount=30, date="2024-05-01")
    add(service, type="expense", category="Food", amount=20, date="2024-05-02")
    add(service, type="income", category="Salary", amount=1000, date="2024-05-01")
    add(service, owner=BOB, amount=500, date="2024-05-01")

    summary = service.spending_summary(ALICE)
    assert summary == {
        "success": True,
        "period": {"startDate": "2024-04-15", "endDate": "2024-05-15"},
        "totalExpenses": 50,
        "totalIncome": 1000,
        "netAmount": 950,
        "transactionCount": 3,
    }

    categories = service.category_analysis(ALICE)
    assert categories["categoryCount"] == 1
    food = categories["categories"][0]
    assert (food["category"], food["total"], food["count"], food["percentage"]) == ("Food", 50, 2, 100)
    assert food["averagePerTransaction"] == 25


def test_analysis_respects_window(service):
    add(service, amount=5, date="2024-05-14")
    add(service, amount=7, date="2024-03-01")

    assert service.spending_summary(ALICE, {"days": "7"})["totalExpenses"] == 5
    assert service.spending_summary(ALICE, {"months": "6"})["totalExpenses"] == 12
    explicit = service.spending_summary(ALICE, {"startDate": "2024-03-01", "endDate": "2024-03-01"})
    assert explicit["totalExpenses"] == 7


def test_spending_analysis_shape(service):
    add(service, category="Food", amount=30, date="2024-05-01")
    add(service, category="Rent", amount=900, date="2024-05-02")
    add(service, type="income", category="Salary", amount=2000, date="2024-05-02")

    analysis = service.spending_analysis(ALICE, {"period": "month"})

    assert analysis["period"] == {"startDate": "2024-04-15", "endDate": "2024-05-15"}
    assert analysis["summary"]["transactionCount"] == 3
    assert [c["category"] for c in analysis["topCategories"]] == ["Rent", "Food"]
    assert [p["date"] for p in analysis["dailyTrend"]] == ["2024-05-01", "2024-05-02"]
    assert analysis["recentTransactions"][-1]["date"] == "2024-05-01"


def test_empty_ledger_analysis(service):
    assert service.spending_analysis(ALICE)["topCategories"] == []
    assert service.category_analysis(ALICE, {"category": "Food"})["totalExpenses"] == 0


def test_category_analysis_filter(service):
    add(service, category="Food", amount=30)
    add(service, category="Travel", amount=70)

    result = service.category_analysis(ALICE, {"category": "Travel", "period": "week"})
    assert result["filteredBy"] == "Travel"
    assert [c["category"] for c in result["categories"]] == ["Travel"]
