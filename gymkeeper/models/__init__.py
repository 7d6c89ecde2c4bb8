from gymkeeper.models.tenant import Tenant, TenantRole
from gymkeeper.models.plan import MembershipPlan, DEFAULT_PLANS
from gymkeeper.models.member import Member, MemberStatus, Gender
from gymkeeper.models.payment import Payment, PaymentMethod
from gymkeeper.models.attendance import Attendance, MarkedBy
