# __init__.py
from app.models.certification import Certification
from app.models.cv import CV
from app.models.job_match import JobMatch
from app.models.jobs import Job
from app.models.student_profile import StudentProfile
from app.models.work_experience import WorkExperience

__all__ = [
	"CV",
	"Certification",
	"Job",
	"JobMatch",
	"StudentProfile",
	"WorkExperience",
]
