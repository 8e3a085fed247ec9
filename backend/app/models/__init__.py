# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme courses.tutor_username → accounts.username échouent
# avec NoReferencedTableError si account.py n'est pas chargé avant course.py.

from app.models.account import Account, AccountCredential, AccountHistory  # noqa: F401 (doit précéder les autres)
from app.models.course import Course, StudentCourse, TeachingMaterial  # noqa: F401
from app.models.tutoring_session import HomeworkAssignment, TutoringSession  # noqa: F401
from app.models.communication import Message, Note, Notification  # noqa: F401
from app.models.payment import PaymentRecord  # noqa: F401
