from dinebook.models.reservation_table_link import ReservationTableLink
from dinebook.models.diner import Diner
from dinebook.models.table import Table
from dinebook.models.payment import Payment, PaymentMethod
from dinebook.models.reservation import Reservation, ReservationStatus
