from interviewai.app.models.user import User
from interviewai.app.models.resume import Resume
from interviewai.app.models.interview_session import InterviewSession, SessionQuestion
