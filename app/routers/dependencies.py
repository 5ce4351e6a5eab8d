# dependencies.py
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.data.skill_tables import SkillTables, load_skill_tables
from app.database import get_db
from app.models.student_profile import StudentProfile
from app.services.gemini_client import GeminiClient
from app.services.job_match_service import JobMatchService
from app.utils.jwt_handler import decode_student_token


# Tokens are issued by the account service; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_student(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> StudentProfile:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    token_data = decode_student_token(token)
    student = db.query(StudentProfile).filter(StudentProfile.id == token_data.student_id).first()
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student profile not found")
    return student


def get_skill_tables(request: Request) -> SkillTables:
    # Loaded once in the app lifespan; fall back to the process-wide cache otherwise.
    return getattr(request.app.state, "skill_tables", None) or load_skill_tables()


def get_analysis_client() -> GeminiClient:
    return GeminiClient.from_settings(settings)


def get_job_match_service(
    db: Session = Depends(get_db),
    client: GeminiClient = Depends(get_analysis_client),
    tables: SkillTables = Depends(get_skill_tables),
) -> JobMatchService:
    return JobMatchService(db, client=client, tables=tables, settings=settings)
