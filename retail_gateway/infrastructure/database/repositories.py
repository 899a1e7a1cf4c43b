"""Data access layer - every query is scoped to a tenant (company_id)"""

from datetime import date, datetime
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from retail_gateway.infrastructure.database.models import (
    Branch,
    Client,
    Coupon,
    FinancialEntry,
    InstallmentRecord,
    MoneyTransfer,
    Product,
    Sale,
    SaleItem,
)
from retail_gateway.domain.models import (
    CartSubmission,
    ClientDebtSummary,
    Installment,
    OverdueInstallment,
)


class BranchRepository:
    """Repository for branches"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: str, branch_id: str) -> Optional[Branch]:
        return (
            self.db.query(Branch)
            .filter(Branch.company_id == company_id, Branch.id == branch_id)
            .first()
        )


class ClientRepository:
    """Repository for clients and their debt summary"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: str, client_id: str) -> Optional[Client]:
        return (
            self.db.query(Client)
            .filter(Client.company_id == company_id, Client.id == client_id)
            .first()
        )

    def get_ids_with_sales(self, company_id: str) -> List[str]:
        """Distinct clients of a tenant that bought at least once"""
        rows = (
            self.db.query(Sale.client_id)
            .filter(Sale.company_id == company_id, Sale.client_id.isnot(None))
            .distinct()
            .all()
        )
        return [row[0] for row in rows]

    def get_overdue(self, company_id: str) -> List[Client]:
        """Clients currently flagged as debtor or defaulter, largest debt first"""
        return (
            self.db.query(Client)
            .filter(Client.company_id == company_id, Client.debt_status != "regular")
            .order_by(Client.overdue_amount_cents.desc(), Client.name)
            .all()
        )

    def save_debt_summary(self, client: Client, summary: ClientDebtSummary, updated_at: datetime) -> Client:
        """Overwrite the cached debt fields of a client"""
        client.debt_status = summary.debt_status
        client.overdue_amount_cents = summary.overdue_amount_cents
        client.overdue_installments_count = summary.overdue_installments_count
        client.first_overdue_date = summary.first_overdue_date
        client.debt_status_updated_at = updated_at
        self.db.flush()
        return client


class ProductRepository:
    """Repository for products and stock"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: str, product_id: str) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.company_id == company_id, Product.id == product_id)
            .first()
        )

    def decrement_stock(self, company_id: str, branch_id: str, product_id: str, quantity: int) -> bool:
        """
        Conditionally take `quantity` units out of stock.

        Single UPDATE guarded by `stock >= quantity`, so two concurrent
        checkouts can never both consume the last units. Returns False when
        the guard did not match (missing product or not enough stock).
        """
        updated = (
            self.db.query(Product)
            .filter(
                Product.company_id == company_id,
                Product.branch_id == branch_id,
                Product.id == product_id,
                Product.stock >= quantity,
            )
            .update({Product.stock: Product.stock - quantity}, synchronize_session=False)
        )
        return updated == 1


class SaleRepository:
    """Repository for sales"""

    def __init__(self, db: Session):
        self.db = db

    def create_sale(self, cart: CartSubmission, sale_date: date, installments: int) -> Sale:
        """Persist the sale and its item lines"""
        db_sale = Sale(
            company_id=cart.company_id,
            branch_id=cart.branch_id,
            created_by=cart.created_by,
            client_id=cart.client_id,
            subtotal_cents=cart.subtotal_cents,
            discount_cents=cart.discount_cents,
            coupon_id=cart.coupon_id,
            coupon_discount_cents=cart.coupon_discount_cents,
            total_price_cents=cart.total_amount_cents,
            payment_method=cart.payment_method,
            installments=installments,
            notes=cart.notes,
            sale_date=sale_date,
        )
        self.db.add(db_sale)
        self.db.flush()  # Get ID without committing

        for item in cart.items:
            self.db.add(
                SaleItem(
                    sale_id=db_sale.id,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    total_price_cents=item.total_price_cents,
                    discount_cents=item.discount_cents,
                )
            )
        self.db.flush()
        return db_sale

    def get(self, company_id: str, sale_id: str) -> Optional[Sale]:
        return (
            self.db.query(Sale)
            .filter(Sale.company_id == company_id, Sale.id == sale_id)
            .first()
        )

    def list_company_ids(self) -> List[str]:
        """Tenants with at least one sale - used only by the reconciliation job"""
        rows = self.db.query(Sale.company_id).distinct().order_by(Sale.company_id).all()
        return [row[0] for row in rows]


class InstallmentRepository:
    """Repository for sale installments"""

    def __init__(self, db: Session):
        self.db = db

    def create_for_sale(self, sale: Sale, installments: List[Installment], paid_at: datetime) -> List[InstallmentRecord]:
        """Create installments numbered 1..n for a sale"""
        total = len(installments)
        records = []
        for number, inst in enumerate(installments, start=1):
            record = InstallmentRecord(
                sale_id=sale.id,
                company_id=sale.company_id,
                branch_id=sale.branch_id,
                created_by=sale.created_by,
                installment_number=number,
                total_installments=total,
                amount_cents=inst.amount_cents,
                due_date=inst.due_date,
                status=inst.status,
                paid_at=paid_at if inst.status == "paid" else None,
            )
            self.db.add(record)
            records.append(record)
        self.db.flush()
        return records

    def get(self, company_id: str, installment_id: str) -> Optional[InstallmentRecord]:
        return (
            self.db.query(InstallmentRecord)
            .filter(InstallmentRecord.company_id == company_id, InstallmentRecord.id == installment_id)
            .first()
        )

    def get_by_sale(self, company_id: str, sale_id: str) -> List[InstallmentRecord]:
        return (
            self.db.query(InstallmentRecord)
            .filter(InstallmentRecord.company_id == company_id, InstallmentRecord.sale_id == sale_id)
            .order_by(InstallmentRecord.installment_number.asc())
            .all()
        )

    def get_overdue_for_client(self, company_id: str, client_id: str, today: date) -> List[OverdueInstallment]:
        """Pending installments of a client's sales due strictly before `today`"""
        rows = (
            self.db.query(InstallmentRecord)
            .join(Sale, Sale.id == InstallmentRecord.sale_id)
            .filter(
                Sale.company_id == company_id,
                Sale.client_id == client_id,
                InstallmentRecord.company_id == company_id,
                InstallmentRecord.status == "pending",
                InstallmentRecord.due_date < today,
            )
            .order_by(InstallmentRecord.due_date.asc())
            .all()
        )
        return [
            OverdueInstallment(
                installment_id=row.id,
                sale_id=row.sale_id,
                installment_number=row.installment_number,
                amount_cents=row.amount_cents,
                due_date=row.due_date,
            )
            for row in rows
        ]


class FinancialEntryRepository:
    """Repository for ledger entries"""

    def __init__(self, db: Session):
        self.db = db

    def create_entry(
        self,
        company_id: str,
        branch_id: str,
        created_by: str,
        entry_type: str,
        amount_cents: int,
        description: str,
        category: str,
        reference_id: str,
        reference_type: str,
        entry_date: datetime,
        status: str = "paid",
    ) -> FinancialEntry:
        entry = FinancialEntry(
            company_id=company_id,
            branch_id=branch_id,
            created_by=created_by,
            type=entry_type,
            amount_cents=amount_cents,
            description=description,
            category=category,
            status=status,
            reference_id=reference_id,
            reference_type=reference_type,
            entry_date=entry_date,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_entries(
        self,
        company_id: str,
        branch_id: Optional[str] = None,
        reference_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[FinancialEntry]:
        query = self.db.query(FinancialEntry).filter(FinancialEntry.company_id == company_id)
        if branch_id:
            query = query.filter(FinancialEntry.branch_id == branch_id)
        if reference_id:
            query = query.filter(FinancialEntry.reference_id == reference_id)
        return query.order_by(FinancialEntry.entry_date.desc()).limit(limit).all()


class MoneyTransferRepository:
    """Repository for inter-branch money transfers"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, transfer: MoneyTransfer) -> MoneyTransfer:
        self.db.add(transfer)
        self.db.flush()
        return transfer

    def get_for_update(self, company_id: str, transfer_id: str) -> Optional[MoneyTransfer]:
        """Fetch and row-lock a transfer so concurrent status changes serialize"""
        return (
            self.db.query(MoneyTransfer)
            .filter(MoneyTransfer.company_id == company_id, MoneyTransfer.id == transfer_id)
            .with_for_update()
            .first()
        )

    def list_transfers(self, company_id: str, statuses: Optional[Iterable[str]] = None) -> List[MoneyTransfer]:
        query = self.db.query(MoneyTransfer).filter(MoneyTransfer.company_id == company_id)
        if statuses:
            query = query.filter(MoneyTransfer.status.in_(list(statuses)))
        return query.order_by(MoneyTransfer.transfer_date.desc(), MoneyTransfer.created_at.desc()).all()


class CouponRepository:
    """Repository for coupons"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: str, coupon_id: str) -> Optional[Coupon]:
        return (
            self.db.query(Coupon)
            .filter(Coupon.company_id == company_id, Coupon.id == coupon_id)
            .first()
        )

    def get_by_code(self, company_id: str, code: str) -> Optional[Coupon]:
        return (
            self.db.query(Coupon)
            .filter(Coupon.company_id == company_id, Coupon.code == code.upper())
            .first()
        )

    def increment_uses(self, company_id: str, coupon_id: str) -> bool:
        """Consume one use, guarded by max_uses so the cap is never exceeded"""
        updated = (
            self.db.query(Coupon)
            .filter(
                Coupon.company_id == company_id,
                Coupon.id == coupon_id,
                (Coupon.max_uses.is_(None)) | (Coupon.uses_count < Coupon.max_uses),
            )
            .update({Coupon.uses_count: Coupon.uses_count + 1}, synchronize_session=False)
        )
        return updated == 1
