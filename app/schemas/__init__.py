# __init__.py
from app.schemas.auth import TokenData
from app.schemas.job_match import JobMatchDetailedAnalysis, JobMatchRead, JobMatchStatus, JobSummary

__all__ = [
	"JobMatchDetailedAnalysis",
	"JobMatchRead",
	"JobMatchStatus",
	"JobSummary",
	"TokenData",
]
