from sqlalchemy import Column, ForeignKey, Integer, Table, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Barbers(Base):
    __tablename__ = 'barbers'

    name = Column(Text, nullable=False)
    # JSON list of weekday names, e.g. '["lunes", "martes"]'
    work_days = Column(Text, nullable=False, server_default=text("'[]'"))
    start_time = Column(Text, nullable=False, server_default=text("'09:00'"))
    end_time = Column(Text, nullable=False, server_default=text("'18:00'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    email = Column(Text)
    phone = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    reservations = relationship('Reservations', back_populates='barber')
    blocks = relationship('Blocks', back_populates='barber')


class Services(Base):
    __tablename__ = 'services'

    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)

    reservations = relationship('Reservations', back_populates='service')


t_barber_services = Table(
    'barber_services', metadata,
    Column('barber_id', ForeignKey('barbers.id', ondelete='CASCADE'), nullable=False),
    Column('service_id', ForeignKey('services.id', ondelete='CASCADE'), nullable=False),
    Column('is_active', Integer, nullable=False, server_default=text('1')),
    UniqueConstraint('barber_id', 'service_id')
)


class Reservations(Base):
    __tablename__ = 'reservations'

    barber_id = Column(ForeignKey('barbers.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    date = Column(Text, nullable=False)        # YYYY-MM-DD
    start_time = Column(Text, nullable=False)  # HH:MM
    end_time = Column(Text)                    # HH:MM, derived from service when missing
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)
    client_name = Column(Text)
    client_phone = Column(Text)
    client_email = Column(Text)
    notes = Column(Text)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    barber = relationship('Barbers', back_populates='reservations')
    service = relationship('Services', back_populates='reservations')
    claims = relationship('ReservationClaims', back_populates='reservation', cascade='all, delete-orphan')


class ReservationClaims(Base):
    """One row per occupied minute of an active reservation."""
    __tablename__ = 'reservation_claims'
    __table_args__ = (
        UniqueConstraint('barber_id', 'date', 'minute'),
    )

    reservation_id = Column(ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False)
    barber_id = Column(Integer, nullable=False)
    date = Column(Text, nullable=False)
    minute = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)

    reservation = relationship('Reservations', back_populates='claims')


class Blocks(Base):
    __tablename__ = 'blocks'

    date_start = Column(Text, nullable=False)
    date_end = Column(Text, nullable=False)
    kind = Column(Text, nullable=False, server_default=text("'block'"))
    id = Column(Integer, primary_key=True)
    # NULL barber_id = shop-wide block
    barber_id = Column(ForeignKey('barbers.id', ondelete='CASCADE'))
    start_time = Column(Text)
    end_time = Column(Text)
    reason = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    barber = relationship('Barbers', back_populates='blocks')
