"""001_baseline

Baseline migration for the drayage lifecycle schema: terminals and gate
hours, shipments, containers, orders and terminal appointments.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM_TYPES = {
    "shipment_type": ("IMPORT", "EXPORT"),
    "shipment_status": ("PENDING", "IN_PROGRESS", "COMPLETED", "CANCELLED"),
    "container_size": ("20", "40", "45"),
    "container_type": ("DRY", "HIGH_CUBE", "REEFER", "TANK", "FLAT_RACK", "OPEN_TOP"),
    "container_state": ("LOADED", "EMPTY"),
    "customs_status": ("PENDING", "HOLD", "RELEASED"),
    "location_type": ("VESSEL", "TERMINAL", "IN_TRANSIT", "CUSTOMER", "YARD"),
    "order_type": ("IMPORT", "EXPORT", "REPO", "EMPTY_RETURN"),
    "order_status": (
        "PENDING", "READY", "DISPATCHED", "IN_PROGRESS", "DELIVERED",
        "HOLD", "COMPLETED", "CANCELLED", "FAILED",
    ),
    "billing_status": ("UNBILLED", "BILLED", "PAID"),
    "appointment_type": ("PICKUP", "RETURN", "DROP_OFF", "DUAL"),
    "appointment_status": (
        "REQUESTED", "PENDING", "CONFIRMED", "CANCELLED",
        "COMPLETED", "MISSED", "RESCHEDULED",
    ),
}

TABLES_WITH_TRIGGERS = [
    "terminals",
    "terminal_gate_hours",
    "shipments",
    "containers",
    "orders",
    "terminal_appointments",
]


def upgrade() -> None:
    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ------------------------------------------------------------------
    # Enum types
    # ------------------------------------------------------------------
    for name, values in ENUM_TYPES.items():
        labels = ", ".join(f"'{v}'" for v in values)
        op.execute(f"CREATE TYPE {name} AS ENUM ({labels})")

    # Order numbers: ORD-YYYYMMDD-NNNNN
    op.execute("CREATE SEQUENCE order_number_seq START 1")

    # ------------------------------------------------------------------
    # Tables (dependency order)
    # ------------------------------------------------------------------

    # --- terminals ---
    op.execute("""
        CREATE TABLE terminals (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name VARCHAR(200) NOT NULL,
            code VARCHAR(20) UNIQUE NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # --- terminal_gate_hours ---
    op.execute("""
        CREATE TABLE terminal_gate_hours (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            terminal_id UUID NOT NULL REFERENCES terminals(id) ON DELETE CASCADE,
            day_of_week INTEGER CHECK (day_of_week BETWEEN 0 AND 6),
            special_date DATE,
            open_time TIME,
            close_time TIME,
            is_closed BOOLEAN NOT NULL DEFAULT FALSE,
            notes VARCHAR(200),
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT ck_terminal_gate_hours_day_or_date
                CHECK (day_of_week IS NOT NULL OR special_date IS NOT NULL),
            CONSTRAINT ck_terminal_gate_hours_open_before_close
                CHECK (is_closed OR (open_time IS NOT NULL AND close_time IS NOT NULL AND open_time < close_time))
        )
    """)

    # --- shipments ---
    op.execute("""
        CREATE TABLE shipments (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            type shipment_type NOT NULL,
            reference_number VARCHAR(50) UNIQUE NOT NULL,
            customer_id UUID NOT NULL,
            steamship_line_id UUID NOT NULL,
            terminal_id UUID NOT NULL,
            port_id UUID,
            consignee_id UUID,
            shipper_id UUID,
            empty_return_location_id UUID,
            vessel_name VARCHAR(100),
            voyage_number VARCHAR(50),
            vessel_eta TIMESTAMP WITH TIME ZONE,
            last_free_day TIMESTAMP WITH TIME ZONE,
            port_cutoff TIMESTAMP WITH TIME ZONE,
            doc_cutoff TIMESTAMP WITH TIME ZONE,
            earliest_return_date TIMESTAMP WITH TIME ZONE,
            status shipment_status NOT NULL DEFAULT 'PENDING',
            special_instructions TEXT,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT ck_shipments_cutoff_order
                CHECK (port_cutoff IS NULL OR doc_cutoff IS NULL OR port_cutoff >= doc_cutoff)
        )
    """)

    # --- containers ---
    op.execute("""
        CREATE TABLE containers (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            shipment_id UUID NOT NULL REFERENCES shipments(id),
            container_number VARCHAR(11) NOT NULL,
            size container_size NOT NULL,
            type container_type NOT NULL DEFAULT 'DRY',
            seal_number VARCHAR(50),
            weight_lbs INTEGER NOT NULL CHECK (weight_lbs > 0 AND weight_lbs <= 67200),
            commodity VARCHAR(200),
            is_hazmat BOOLEAN NOT NULL DEFAULT FALSE,
            hazmat_class VARCHAR(10),
            un_number VARCHAR(10),
            is_overweight BOOLEAN NOT NULL DEFAULT FALSE,
            is_reefer BOOLEAN NOT NULL DEFAULT FALSE,
            reefer_temp_setpoint NUMERIC(5, 2),
            customs_status customs_status NOT NULL DEFAULT 'PENDING',
            customs_hold_type VARCHAR(50),
            terminal_available_date TIMESTAMP WITH TIME ZONE,
            current_state container_state NOT NULL DEFAULT 'LOADED',
            current_location_type location_type NOT NULL DEFAULT 'VESSEL',
            current_location_id UUID,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT uq_containers_shipment_number UNIQUE (shipment_id, container_number)
        )
    """)

    # --- orders ---
    op.execute("""
        CREATE TABLE orders (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            order_number VARCHAR(20) UNIQUE NOT NULL,
            container_id UUID NOT NULL REFERENCES containers(id),
            shipment_id UUID NOT NULL REFERENCES shipments(id),
            type order_type NOT NULL,
            status order_status NOT NULL DEFAULT 'PENDING',
            status_reason TEXT,
            billing_status billing_status NOT NULL DEFAULT 'UNBILLED',
            pickup_location_id UUID,
            delivery_location_id UUID,
            return_location_id UUID,
            requested_pickup_date TIMESTAMP WITH TIME ZONE,
            requested_delivery_date TIMESTAMP WITH TIME ZONE,
            special_instructions TEXT,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # --- terminal_appointments ---
    op.execute("""
        CREATE TABLE terminal_appointments (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            order_id UUID NOT NULL REFERENCES orders(id),
            terminal_id UUID NOT NULL,
            type appointment_type NOT NULL,
            status appointment_status NOT NULL DEFAULT 'REQUESTED',
            container_id UUID,
            container_number VARCHAR(11),
            requested_time TIMESTAMP WITH TIME ZONE NOT NULL,
            window_start TIMESTAMP WITH TIME ZONE NOT NULL,
            window_end TIMESTAMP WITH TIME ZONE NOT NULL,
            confirmed_time TIMESTAMP WITH TIME ZONE,
            confirmation_number VARCHAR(50),
            confirmed_by VARCHAR(100),
            confirmation_task_id VARCHAR(255),
            gate_number VARCHAR(20),
            actual_arrival_time TIMESTAMP WITH TIME ZONE,
            was_on_time BOOLEAN,
            actual_completion_time TIMESTAMP WITH TIME ZONE,
            gate_ticket_number VARCHAR(50),
            cancellation_reason TEXT,
            rescheduled_from UUID REFERENCES terminal_appointments(id),
            requested_by VARCHAR(100),
            special_instructions TEXT,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT ck_terminal_appointments_window CHECK (window_end > window_start)
        )
    """)

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------
    op.execute("CREATE INDEX ix_terminal_gate_hours_terminal_id ON terminal_gate_hours (terminal_id)")
    op.execute("CREATE INDEX ix_shipments_customer_id ON shipments (customer_id)")
    op.execute("CREATE INDEX ix_shipments_terminal_id ON shipments (terminal_id)")
    op.execute("CREATE INDEX ix_containers_shipment_id ON containers (shipment_id)")
    op.execute("CREATE INDEX ix_containers_container_number ON containers (container_number)")
    op.execute("CREATE INDEX ix_orders_container_id ON orders (container_id)")
    op.execute("CREATE INDEX ix_orders_shipment_id ON orders (shipment_id)")
    op.execute("CREATE INDEX ix_orders_status ON orders (status)")
    op.execute("CREATE INDEX ix_orders_created ON orders (created_at DESC)")
    op.execute("CREATE INDEX ix_terminal_appointments_order_id ON terminal_appointments (order_id)")
    op.execute("CREATE INDEX ix_terminal_appointments_status ON terminal_appointments (status)")
    op.execute(
        "CREATE INDEX ix_terminal_appointments_terminal_window "
        "ON terminal_appointments (terminal_id, window_start, window_end)"
    )

    # At most one active order per container
    op.execute(
        "CREATE UNIQUE INDEX uq_orders_active_container ON orders (container_id) "
        "WHERE status NOT IN ('COMPLETED', 'CANCELLED', 'FAILED')"
    )
    # At most one active appointment per order
    op.execute(
        "CREATE UNIQUE INDEX uq_terminal_appointments_active_order ON terminal_appointments (order_id) "
        "WHERE status IN ('REQUESTED', 'PENDING', 'CONFIRMED')"
    )

    # ------------------------------------------------------------------
    # updated_at triggers
    # ------------------------------------------------------------------
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = CURRENT_TIMESTAMP;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)

    for table in TABLES_WITH_TRIGGERS:
        op.execute(f"""
            CREATE TRIGGER update_{table}_updated_at
            BEFORE UPDATE ON {table}
            FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()
        """)


def downgrade() -> None:
    # Drop triggers
    for table in TABLES_WITH_TRIGGERS:
        op.execute(f"DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}")

    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    # ------------------------------------------------------------------
    # Drop tables (reverse dependency order)
    # ------------------------------------------------------------------
    op.execute("DROP TABLE IF EXISTS terminal_appointments CASCADE")
    op.execute("DROP TABLE IF EXISTS orders CASCADE")
    op.execute("DROP TABLE IF EXISTS containers CASCADE")
    op.execute("DROP TABLE IF EXISTS shipments CASCADE")
    op.execute("DROP TABLE IF EXISTS terminal_gate_hours CASCADE")
    op.execute("DROP TABLE IF EXISTS terminals CASCADE")

    op.execute("DROP SEQUENCE IF EXISTS order_number_seq")

    # ------------------------------------------------------------------
    # Drop enum types
    # ------------------------------------------------------------------
    for name in reversed(list(ENUM_TYPES)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
