"""SQLAlchemy ORM models for tenants' sales, installments, clients and ledger"""

import uuid
from sqlalchemy import (
    Column,
    String,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Integer,
    ForeignKey,
    Text,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class Branch(Base):
    """Store location of a tenant"""

    __tablename__ = "branches"

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    code = Column(Text, nullable=True)
    is_main = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Client(Base):
    """Customer with a denormalized debt summary"""

    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False, index=True)
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    document = Column(Text, nullable=True)
    client_type = Column(Text, nullable=False, default="individual")

    # Cache of the debt classification, rewritten by the debt classifier only
    debt_status = Column(Text, nullable=False, default="regular", index=True)
    overdue_amount_cents = Column(BigInteger, nullable=False, default=0)
    overdue_installments_count = Column(Integer, nullable=False, default=0)
    first_overdue_date = Column(Date, nullable=True)
    debt_status_updated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    sales = relationship("Sale", back_populates="client")


class Product(Base):
    """Stocked product of a branch"""

    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False, index=True)
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False)
    name = Column(Text, nullable=False)
    price_cents = Column(BigInteger, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    barcode = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class Sale(Base):
    """Checkout of a cart - immutable once created"""

    __tablename__ = "sales"

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False, index=True)
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False)
    created_by = Column(Text, nullable=False)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=True, index=True)
    subtotal_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False, default=0)
    coupon_id = Column(String(36), nullable=True)
    coupon_discount_cents = Column(BigInteger, nullable=False, default=0)
    total_price_cents = Column(BigInteger, nullable=False)
    payment_method = Column(Text, nullable=False)
    installments = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)
    sale_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="sales")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    installment_rows = relationship(
        "InstallmentRecord",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="InstallmentRecord.installment_number",
    )


class SaleItem(Base):
    """Product line within a sale"""

    __tablename__ = "sale_items"

    id = Column(String(36), primary_key=True, default=new_id)
    sale_id = Column(String(36), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    product_name = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(BigInteger, nullable=False)
    total_price_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False, default=0)

    sale = relationship("Sale", back_populates="items")


class InstallmentRecord(Base):
    """Scheduled payment of a sale"""

    __tablename__ = "installments"
    __table_args__ = (UniqueConstraint("sale_id", "installment_number", name="uq_installments_sale_number"),)

    id = Column(String(36), primary_key=True, default=new_id)
    sale_id = Column(String(36), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    company_id = Column(Text, nullable=False, index=True)
    branch_id = Column(String(36), nullable=False)
    created_by = Column(Text, nullable=False)
    installment_number = Column(Integer, nullable=False)
    total_installments = Column(Integer, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(Text, nullable=False, default="pending")
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    sale = relationship("Sale", back_populates="installment_rows")


class FinancialEntry(Base):
    """Ledger line - income or expense of a branch"""

    __tablename__ = "financial_entries"
    __table_args__ = (CheckConstraint("amount_cents > 0", name="ck_financial_entries_amount_positive"),)

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False, index=True)
    branch_id = Column(String(36), nullable=False, index=True)
    created_by = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    reference_id = Column(String(36), nullable=True, index=True)
    reference_type = Column(Text, nullable=True)
    entry_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class MoneyTransfer(Base):
    """Cash moved between two branches of a tenant"""

    __tablename__ = "money_transfers"

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False, index=True)
    created_by = Column(Text, nullable=False)
    from_branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False)
    to_branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False)
    transfer_type = Column(Text, nullable=False, default="operational")
    status = Column(Text, nullable=False, default="pending")
    transfer_date = Column(Date, nullable=False)
    completed_date = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class Coupon(Base):
    """Discount coupon of a tenant"""

    __tablename__ = "coupons"
    __table_args__ = (UniqueConstraint("company_id", "code", name="uq_coupons_company_code"),)

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False, index=True)
    code = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    discount_type = Column(Text, nullable=False)
    discount_value = Column(BigInteger, nullable=False)
    min_purchase_cents = Column(BigInteger, nullable=False, default=0)
    max_uses = Column(Integer, nullable=True)
    uses_count = Column(Integer, nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
