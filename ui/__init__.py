from .overview import overview_section
from .residents import residents_section, history_section
from .payments import add_payment_section
from .admin import login_section, admin_section
from .trends import trends_section
