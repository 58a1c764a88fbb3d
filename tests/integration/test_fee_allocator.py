"""Integration tests for the charge store and the fee allocator."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from schooldesk.models import Admission, MonthlyFee, Student
from schooldesk.services.allocation import FeeAllocator, allocate
from schooldesk.services.charge_store import ChargeSnapshot, ChargeStore


@pytest.fixture
def store(db_session):
    return ChargeStore(db_session, MonthlyFee)


@pytest.fixture
def allocator(store):
    return FeeAllocator(store)


def add_fee(db_session, student, school_class, month, amount, paid):
    fee = MonthlyFee(
        student_id=student.id,
        class_id=school_class.id,
        date=date(2025, month, 1),
        amount=Decimal(amount),
        paid=Decimal(paid),
    )
    db_session.add(fee)
    db_session.flush()
    return fee.id


@pytest.mark.integration
class TestChargeStoreOrdering:
    """unpaid_list and paid_list decide the allocation order."""

    def test_unpaid_list_partial_first_then_oldest(self, db_session, store, student, school_class):
        mar = add_fee(db_session, student, school_class, 3, "100", "0")
        jan = add_fee(db_session, student, school_class, 1, "100", "0")
        feb = add_fee(db_session, student, school_class, 2, "100", "40")
        add_fee(db_session, student, school_class, 4, "100", "100")

        unpaid = store.unpaid_list(student.id)

        assert [c.id for c in unpaid] == [feb, jan, mar]
        assert unpaid[0] == ChargeSnapshot(feb, Decimal("100.00"), Decimal("40.00"))

    def test_paid_list_least_paid_first_then_newest(self, db_session, store, student, school_class):
        jan = add_fee(db_session, student, school_class, 1, "100", "100")
        feb = add_fee(db_session, student, school_class, 2, "100", "100")
        mar = add_fee(db_session, student, school_class, 3, "100", "30")
        add_fee(db_session, student, school_class, 4, "100", "0")

        assert [c.id for c in store.paid_list(student.id)] == [mar, feb, jan]

    def test_lists_are_scoped_to_the_student(self, db_session, store, student, school_class):
        other = Student(student_name="Other Pupil")
        db_session.add(other)
        db_session.flush()
        add_fee(db_session, other, school_class, 1, "100", "50")

        assert store.unpaid_list(student.id) == []
        assert store.paid_list(student.id) == []
        assert len(store.unpaid_list(other.id)) == 1

    def test_apply_delta_on_missing_charge_reports_false(self, store):
        assert store.apply_delta(9999, Decimal("10")) is False

    def test_paid_above_amount_is_rejected_by_the_database(
        self, db_session, store, three_unpaid_months
    ):
        with pytest.raises(IntegrityError):
            store.apply_delta(three_unpaid_months[0], Decimal("100.01"))

    def test_delete_accepts_one_id_or_many(self, store, three_unpaid_months):
        jan, feb, mar = three_unpaid_months

        assert store.delete(jan) == 1
        assert store.delete([feb, mar, 12345]) == 2
        assert store.delete([]) == 0

    def test_outstanding_sums_what_is_owed(self, db_session, store, student, school_class):
        add_fee(db_session, student, school_class, 1, "100", "25")
        add_fee(db_session, student, school_class, 2, "80", "0")

        assert store.outstanding(student.id) == Decimal("155.00")


@pytest.mark.integration
class TestFeeAllocator:
    def test_payment_then_reversal(self, allocator, student, three_unpaid_months, read_paid):
        jan, feb, mar = three_unpaid_months

        assert allocator.allocate(student.id, Decimal("150")) == Decimal("150")
        assert read_paid() == {jan: Decimal("100"), feb: Decimal("50"), mar: Decimal("0")}

        assert allocator.allocate(student.id, Decimal("-30")) == Decimal("-30")
        assert read_paid() == {jan: Decimal("100"), feb: Decimal("20"), mar: Decimal("0")}

    def test_zero_amount_changes_nothing(self, allocator, student, three_unpaid_months, read_paid):
        before = read_paid()

        assert allocator.allocate(student.id, Decimal("0")) == Decimal("0")
        assert read_paid() == before

    def test_payment_beyond_debt_is_capped(self, allocator, student, three_unpaid_months, read_paid):
        used = allocator.allocate(student.id, Decimal("1000"))

        assert used == Decimal("300")
        assert set(read_paid().values()) == {Decimal("100")}

    def test_reversal_beyond_paid_is_capped(self, allocator, student, three_unpaid_months, read_paid):
        allocator.allocate(student.id, Decimal("120"))

        assert allocator.allocate(student.id, Decimal("-500")) == Decimal("-120")
        assert set(read_paid().values()) == {Decimal("0")}

    @pytest.mark.parametrize("amount", ["0.01", "45.50", "100", "199.99", "300"])
    def test_reversal_restores_previous_state(
        self, allocator, student, three_unpaid_months, read_paid, amount
    ):
        allocator.allocate(student.id, Decimal("60"))
        before = read_paid()

        used = allocator.allocate(student.id, Decimal(amount))
        assert allocator.allocate(student.id, -used) == -used

        assert read_paid() == before

    def test_total_paid_changes_by_used(self, allocator, student, three_unpaid_months, read_paid):
        before = sum(read_paid().values())

        used = allocator.allocate(student.id, Decimal("175.25"))

        assert sum(read_paid().values()) - before == used
        for paid in read_paid().values():
            assert Decimal("0") <= paid <= Decimal("100")

    @pytest.mark.parametrize(
        "amount, expected",
        [("10.004", "10.00"), ("10.009", "10.00"), ("-0.005", "0"), ("0.004", "0")],
    )
    def test_fraction_of_a_cent_is_not_reported_as_used(
        self, allocator, student, three_unpaid_months, read_paid, amount, expected
    ):
        allocator.allocate(student.id, Decimal("20"))
        before = sum(read_paid().values())

        used = allocator.allocate(student.id, Decimal(amount))

        assert used == Decimal(expected)
        assert sum(read_paid().values()) - before == used

    def test_student_without_charges_uses_nothing(self, allocator, student):
        assert allocator.allocate(student.id, Decimal("50")) == Decimal("0")
        assert allocator.allocate(student.id, Decimal("-50")) == Decimal("0")

    def test_admission_table(self, db_session, student, school_class, read_paid):
        admission = Admission(
            student_id=student.id,
            class_id=school_class.id,
            amount=Decimal("500"),
            paid=Decimal("0"),
            date=date(2025, 1, 10),
        )
        db_session.add(admission)
        db_session.flush()

        used = FeeAllocator(ChargeStore(db_session, Admission)).allocate(student.id, Decimal("700"))

        assert used == Decimal("500")
        assert read_paid(Admission) == {admission.id: Decimal("500")}


@pytest.mark.integration
class TestAllocateInOwnTransaction:
    def test_commits_through_session_factory(
        self, session_factory, student, three_unpaid_months, read_paid
    ):
        jan, feb, mar = three_unpaid_months

        used = allocate(student.id, Decimal("250"), session_factory=session_factory)

        assert used == Decimal("250")
        assert read_paid() == {jan: Decimal("100"), feb: Decimal("100"), mar: Decimal("50")}

    def test_rolls_back_when_a_statement_fails(
        self, session_factory, student, three_unpaid_months, read_paid, monkeypatch
    ):
        calls = []
        original = ChargeStore.apply_delta

        def failing_apply(self, charge_id, delta):
            calls.append(charge_id)
            if len(calls) == 2:
                return False
            return original(self, charge_id, delta)

        monkeypatch.setattr(ChargeStore, "apply_delta", failing_apply)

        with pytest.raises(Exception, match="vanished"):
            allocate(student.id, Decimal("150"), session_factory=session_factory)

        assert set(read_paid().values()) == {Decimal("0")}
