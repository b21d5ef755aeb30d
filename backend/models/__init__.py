# Import every model so Base.metadata knows all tables
from models import users, farmer, buyer, product, cart, order, payment, logistics, log  # noqa: F401
