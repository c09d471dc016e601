from .db import db, atomic
from .user import User
from .warehouse import Warehouse, WarehouseAnalytics
from .payment import Payment
from .confirmed_booking import ConfirmedBooking
from .booking_inquiry import BookingInquiry
from .inquiry import Inquiry
from .contact import Contact
from .one_time_code import OneTimeCode
from .activity_log import ActivityLog
from .email_outbox import EmailOutbox
