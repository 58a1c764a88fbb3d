"""Pytest configuration: in-memory SQLite database per test."""

import os

# Set test database URL BEFORE any imports from schooldesk
# so the module-level engine never points at a real file
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from schooldesk.controllers import create_router  # noqa: E402
from schooldesk.db import create_db_engine, create_session_factory  # noqa: E402
from schooldesk.models import Admission, Base, MonthlyFee, Payment, SchoolClass, Student  # noqa: E402


@pytest.fixture
def engine():
    """Fresh in-memory database with all tables."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    """Create test database session."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def router(session_factory):
    """IPC router wired to the test database."""
    return create_router(session_factory)


@pytest.fixture
def school_class(db_session):
    """Class with admission fee 500 and monthly fee 100."""
    school_class = SchoolClass(
        name="Grade 1", admission_fee=Decimal("500.00"), monthly_fee=Decimal("100.00")
    )
    db_session.add(school_class)
    db_session.commit()
    return school_class


@pytest.fixture
def student(db_session):
    """Student with no credit."""
    student = Student(student_name="Amina Yusuf", guardian_name="Yusuf Bello", credit=Decimal("0"))
    db_session.add(student)
    db_session.commit()
    return student


@pytest.fixture
def three_unpaid_months(db_session, student, school_class):
    """Jan, Feb, Mar 2025 monthly fees of 100, nothing paid."""
    fees = [
        MonthlyFee(
            student_id=student.id,
            class_id=school_class.id,
            date=date(2025, month, 1),
            amount=Decimal("100.00"),
            paid=Decimal("0"),
        )
        for month in (1, 2, 3)
    ]
    db_session.add_all(fees)
    db_session.commit()
    return [fee.id for fee in fees]


@pytest.fixture
def read_paid(db_session):
    """Return a reader of current paid amounts straight from the database."""

    def _read(model=MonthlyFee) -> dict[int, Decimal]:
        rows = db_session.execute(select(model.id, model.paid).order_by(model.id))
        return {charge_id: Decimal(str(paid)) for charge_id, paid in rows}

    return _read


@pytest.fixture
def ledger_gap(db_session):
    """Return a checker of the money ledger for one student."""

    def _gap(student_id: int) -> Decimal:
        return _ledger_gap(db_session, student_id)

    return _gap


def _ledger_gap(session, student_id: int) -> Decimal:
    """Payments minus (credit + paid on charges); zero when the books balance."""
    payments = session.scalar(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.student_id == student_id)
    )
    monthly = session.scalar(
        select(func.coalesce(func.sum(MonthlyFee.paid), 0)).where(
            MonthlyFee.student_id == student_id
        )
    )
    admission = session.scalar(
        select(func.coalesce(func.sum(Admission.paid), 0)).where(Admission.student_id == student_id)
    )
    credit = session.scalar(select(Student.credit).where(Student.id == student_id))
    total = Decimal(str(payments)) - Decimal(str(monthly)) - Decimal(str(admission))
    return (total - Decimal(str(credit))).quantize(Decimal("0.01"))
