"""
测试夹具：内存SQLite、已登录的管理员/员工、测试客户端
"""
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_session, get_password_hash
from app.db.database import Base
from app.main import create_app
from app.models import Customer, CustomerServicePrice, Order, Service, User
from app.models.user import ROLE_ADMIN, ROLE_USER

PASSWORD = "secret-pass-123"
# bcrypt 较慢，所有测试用户共用一个哈希
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def make_user(db, name, email, role=ROLE_USER):
    user = User(name=name, email=email, password_hash=PASSWORD_HASH, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_customer(db, name, phone_number="9876543210", **kwargs):
    customer = Customer(name=name, phone_number=phone_number, **kwargs)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def make_service(db, name, price):
    service = Service(name=name, price=Decimal(str(price)))
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def set_custom_price(db, customer, service, price):
    db.add(CustomerServicePrice(customer_id=customer.id, service_id=service.id, custom_price=Decimal(str(price))))
    db.commit()


def make_order(db, customer, service, quantity, creator, created_at=None, party=None):
    order = Order(
        customer_id=customer.id,
        service_id=service.id,
        quantity=quantity,
        created_by=creator.id,
        party_id=party.id if party else None,
    )
    if created_at is not None:
        order.created_at = created_at
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


@pytest.fixture
def admin(db):
    return make_user(db, "Admin", "admin@example.com", role=ROLE_ADMIN)


@pytest.fixture
def worker(db):
    return make_user(db, "Worker", "worker@example.com")


@pytest.fixture
def admin_headers(db, admin):
    session = create_session(db, admin)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def worker_headers(db, worker):
    session = create_session(db, worker)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def client(engine, session_factory):
    app = create_app(bind=engine, session_factory=session_factory)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def march_2025():
    return datetime(2025, 3, 10, 12, 0, 0)
