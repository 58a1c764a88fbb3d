"""Integration tests for money moving between payments, credit and charges."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from schooldesk.models import Admission, MonthlyFee, Payment, SchoolClass
from schooldesk.schemas.admission import AdmissionCreate, AdmissionUpdate
from schooldesk.schemas.payment import PaymentCreate, PaymentUpdate
from schooldesk.services import AdmissionService, ClassService, PaymentService, StudentService
from schooldesk.services.result import FailureKind


@pytest.fixture
def payments(db_session):
    return PaymentService(db_session)


@pytest.fixture
def admitted(db_session, student, school_class):
    """Student admitted on 2025-01-15 with three monthly fees and nothing paid."""
    admission_id = (
        AdmissionService(db_session)
        .create(
            AdmissionCreate(
                student_id=student.id,
                class_id=school_class.id,
                months=3,
                date=date(2025, 1, 15),
            )
        )
        .unwrap()
    )
    return admission_id


def payment_payload(student, amount, day=date(2025, 1, 20)):
    return PaymentCreate(student_id=student.id, amount=Decimal(amount), date=day)


@pytest.mark.integration
class TestPaymentAllocation:
    def test_payment_fills_months_in_order(
        self, payments, student, three_unpaid_months, read_paid, ledger_gap
    ):
        jan, feb, mar = three_unpaid_months

        payments.create(payment_payload(student, "150")).unwrap()

        assert read_paid() == {jan: Decimal("100"), feb: Decimal("50"), mar: Decimal("0")}
        assert student.credit == Decimal("0")
        assert ledger_gap(student.id) == Decimal("0")

    def test_overpayment_stays_as_credit(self, payments, student, three_unpaid_months, ledger_gap):
        payments.create(payment_payload(student, "320")).unwrap()

        assert student.credit == Decimal("20")
        assert ledger_gap(student.id) == Decimal("0")

    def test_admission_is_settled_before_months(
        self, payments, student, admitted, read_paid, ledger_gap
    ):
        payments.create(payment_payload(student, "650")).unwrap()

        assert read_paid(Admission) == {admitted: Decimal("500")}
        assert sorted(read_paid().values()) == [Decimal("0"), Decimal("50"), Decimal("100")]
        assert ledger_gap(student.id) == Decimal("0")

    def test_unknown_student_is_not_found(self, payments):
        result = payments.create(
            PaymentCreate(student_id=77, amount=Decimal("10"), date=date(2025, 1, 1))
        )

        assert result.kind == FailureKind.NOT_FOUND
        assert result.message == "Student not found"


@pytest.mark.integration
class TestPaymentEdits:
    def test_lower_amount_reverses_latest_month_first(
        self, payments, student, admitted, read_paid, ledger_gap
    ):
        payment_id = payments.create(payment_payload(student, "650")).unwrap()

        assert payments.update(payment_id, PaymentUpdate(amount=Decimal("600"))).unwrap() is True

        assert read_paid(Admission) == {admitted: Decimal("500")}
        assert sorted(read_paid().values()) == [Decimal("0"), Decimal("0"), Decimal("100")]
        assert ledger_gap(student.id) == Decimal("0")

    def test_higher_amount_is_allocated(self, payments, student, three_unpaid_months, ledger_gap):
        payment_id = payments.create(payment_payload(student, "100")).unwrap()

        payments.update(payment_id, PaymentUpdate(amount=Decimal("250"))).unwrap()

        assert payments.get(payment_id).unwrap().amount == Decimal("250")
        assert ledger_gap(student.id) == Decimal("0")

    def test_lower_amount_takes_credit_first(
        self, payments, student, three_unpaid_months, read_paid, ledger_gap
    ):
        payment_id = payments.create(payment_payload(student, "330")).unwrap()

        payments.update(payment_id, PaymentUpdate(amount=Decimal("310"))).unwrap()

        assert student.credit == Decimal("10")
        assert set(read_paid().values()) == {Decimal("100")}
        assert ledger_gap(student.id) == Decimal("0")

    def test_remark_only_update(self, payments, student):
        payment_id = payments.create(payment_payload(student, "40")).unwrap()

        assert payments.update(payment_id, PaymentUpdate(remark="cash")).unwrap() is True
        assert payments.get(payment_id).unwrap().remark == "cash"
        assert student.credit == Decimal("40")

    def test_delete_reverses_months_then_admission(
        self, db_session, payments, student, admitted, read_paid, ledger_gap
    ):
        first = payments.create(payment_payload(student, "650")).unwrap()
        payments.create(payment_payload(student, "100", date(2025, 2, 1))).unwrap()

        assert payments.delete(first).unwrap() is True

        # 750 paid then 650 taken back: months empty before the admission is touched
        assert read_paid(Admission) == {admitted: Decimal("100")}
        assert set(read_paid().values()) == {Decimal("0")}
        assert ledger_gap(student.id) == Decimal("0")
        assert db_session.scalar(select(func.count(Payment.id))) == 1

    def test_delete_missing_is_false(self, payments):
        assert payments.delete([1, 2]).value is False

    def test_listing_and_totals(self, payments, student):
        payments.create(payment_payload(student, "40", date(2025, 1, 5))).unwrap()
        payments.create(payment_payload(student, "60", date(2025, 3, 5))).unwrap()

        rows = payments.list(student.id).unwrap()

        assert [row["amount"] for row in rows] == [Decimal("60"), Decimal("40")]
        assert rows[0]["student_name"] == "Amina Yusuf"
        assert payments.total_paid(student.id).unwrap() == Decimal("100")
        assert payments.total_paid(student.id, until=date(2025, 2, 1)).unwrap() == Decimal("40")


@pytest.mark.integration
class TestLedgerAcrossServices:
    def test_mixed_sequence_keeps_books_balanced(
        self, db_session, payments, student, school_class, ledger_gap
    ):
        admissions = AdmissionService(db_session)

        first = payments.create(payment_payload(student, "275.50")).unwrap()
        assert ledger_gap(student.id) == Decimal("0")

        admission_id = admissions.create(
            AdmissionCreate(
                student_id=student.id,
                class_id=school_class.id,
                amount=Decimal("200"),
                monthly=Decimal("80"),
                months=4,
                date=date(2025, 9, 1),
            )
        ).unwrap()
        assert ledger_gap(student.id) == Decimal("0")

        payments.update(first, PaymentUpdate(amount=Decimal("120"))).unwrap()
        assert ledger_gap(student.id) == Decimal("0")

        payments.create(payment_payload(student, "500")).unwrap()
        assert ledger_gap(student.id) == Decimal("0")

        admissions.update(admission_id, AdmissionUpdate(amount=Decimal("250"))).unwrap()
        assert ledger_gap(student.id) == Decimal("0")

        admissions.delete(admission_id).unwrap()
        assert ledger_gap(student.id) == Decimal("0")

        payments.delete(first).unwrap()
        assert ledger_gap(student.id) == Decimal("0")

        for model in (MonthlyFee, Admission):
            for charge in db_session.scalars(select(model)):
                assert Decimal("0") <= charge.paid <= charge.amount

    def test_admission_defaults_come_from_class(self, db_session, student, school_class, admitted):
        admission = AdmissionService(db_session).get(admitted).unwrap()
        fees = db_session.scalars(select(MonthlyFee).order_by(MonthlyFee.date)).all()

        assert admission.amount == Decimal("500")
        assert admission.class_name == "Grade 1"
        assert [f.date for f in fees] == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]
        assert {f.amount for f in fees} == {Decimal("100")}

    def test_class_removal_refunds_to_credit(
        self, db_session, payments, student, school_class, admitted, ledger_gap
    ):
        other = SchoolClass(name="Grade 2", admission_fee=Decimal("0"), monthly_fee=Decimal("90"))
        db_session.add(other)
        db_session.flush()
        payments.create(payment_payload(student, "550")).unwrap()

        assert ClassService(db_session).delete(school_class.id).unwrap() is True

        assert db_session.scalar(select(func.count(MonthlyFee.id))) == 0
        assert db_session.scalar(select(func.count(Admission.id))) == 0
        assert ledger_gap(student.id) == Decimal("0")
        assert db_session.scalar(select(SchoolClass.id)) == other.id

    def test_balance(self, db_session, payments, student, admitted):
        payments.create(payment_payload(student, "550")).unwrap()

        balance = StudentService(db_session).balance(student.id).unwrap()

        assert balance.credit == Decimal("0")
        assert balance.admission_due == Decimal("0")
        assert balance.monthly_due == Decimal("250")
        assert balance.total_due == Decimal("250")
        assert balance.total_paid == Decimal("550")

    def test_student_delete_cascades(self, db_session, payments, student, admitted):
        payments.create(payment_payload(student, "50")).unwrap()

        assert StudentService(db_session).delete([student.id]).unwrap() is True

        for model in (MonthlyFee, Admission, Payment):
            assert db_session.scalar(select(func.count(model.id))) == 0
