"""
Prompt assembly for the AI candidate.

Pure functions: every output is a deterministic function of the session
configuration, the question and the conversation so far.
"""
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from interviewai.client.models import ConversationEntry, SessionConfig


@dataclass(frozen=True)
class LengthGuidance:
    kind: str
    text: str


_CODING_TEXT = """## RESPONSE LENGTH GUIDANCE - TECHNICAL/CODING ANSWER
**Target Length**: Variable based on complexity (100-400 words)
**Structure**: This is a technical/coding question requiring systematic problem-solving.

**Required Elements**:
- **Problem Understanding**: Clarify the requirements and constraints
- **Approach Explanation**: Outline your solution strategy before coding
- **Step-by-Step Solution**: Write clean, commented code if applicable
- **Complexity Analysis**: Discuss time/space complexity
- **Edge Cases**: Consider and mention edge cases
- **Alternative Solutions**: If time permits, mention other approaches
- **Testing Strategy**: Briefly explain how you'd test this

**Tone**: Analytical, methodical, and confident in technical abilities
**Note**: If screen sharing is active, use the capture feature to analyze the coding problem"""

_VERY_LONG_TEXT = """## RESPONSE LENGTH GUIDANCE - COMPREHENSIVE ANSWER
**Target Length**: 300-500 words (2-3 minutes speaking time)
**Structure**: This question requires a detailed, comprehensive response with multiple examples and thorough explanation.

**Required Elements**:
- **Detailed Introduction**: Set comprehensive context
- **Multiple Examples**: Provide 2-3 specific, detailed examples with outcomes
- **Process Explanation**: Walk through your methodology/approach step-by-step
- **Results & Impact**: Quantify achievements and explain broader implications
- **Future Application**: Connect to the role and show forward-thinking
- **Professional Depth**: Demonstrate expertise and strategic thinking

**Tone**: Professional, confident, and comprehensive while maintaining engagement"""

_LONG_TEXT = """## RESPONSE LENGTH GUIDANCE - DETAILED ANSWER
**Target Length**: 200-400 words (60-120 seconds speaking time)
**Structure**: This question needs a structured, detailed response with specific examples.

**Required Elements**:
- **Clear Setup**: Provide context and background (1-2 sentences)
- **Specific Example**: Give a detailed, relevant example from your experience
- **Action Taken**: Explain what you did and your thought process
- **Results Achieved**: Share measurable outcomes and impact
- **Learning/Growth**: What you learned or how it shaped you
- **Relevance**: Connect back to the role/company

**Tone**: Professional, engaging, and story-driven with concrete details"""

_MEDIUM_TEXT = """## RESPONSE LENGTH GUIDANCE - MODERATE ANSWER
**Target Length**: 100-200 words (30-60 seconds speaking time)
**Structure**: This question needs a focused, well-organized response.

**Required Elements**:
- **Direct Answer**: Address the question clearly upfront
- **Supporting Example**: Provide one relevant example or evidence
- **Brief Explanation**: Give context or reasoning (2-3 sentences)
- **Connection**: Link to the role or demonstrate value
- **Confident Close**: End with a strong, forward-looking statement

**Tone**: Professional, concise, and confident without being rushed"""

_SHORT_TEXT = """## RESPONSE LENGTH GUIDANCE - BRIEF ANSWER
**Target Length**: 50-100 words (15-30 seconds speaking time)
**Structure**: This question requires a concise, direct response.

**Required Elements**:
- **Immediate Answer**: Respond directly to the question
- **Brief Support**: Add 1-2 sentences of context or reasoning if needed
- **Professional Tone**: Keep it warm but efficient
- **Clear Close**: End definitively without trailing off

**Tone**: Friendly, confident, and appropriately brief"""

_FOLLOW_UP_TEXT = """## RESPONSE LENGTH GUIDANCE - FOLLOW-UP ANSWER
**Target Length**: 75-150 words (30-45 seconds speaking time)
**Structure**: This is a follow-up question - build on your previous answer.

**Required Elements**:
- **Reference Previous**: Acknowledge your previous response
- **Additional Detail**: Provide the specific elaboration requested
- **New Insight**: Add something valuable you didn't mention before
- **Natural Conclusion**: End without being repetitive

**Tone**: Engaging and additive - show you have more depth to offer"""

_STANDARD_TEXT = """## RESPONSE LENGTH GUIDANCE - STANDARD ANSWER
**Target Length**: 150-250 words (45-75 seconds speaking time)
**Structure**: This question needs a balanced, professional response.

**Required Elements**:
- **Clear Opening**: Address the question directly
- **Supporting Details**: Provide relevant context and examples
- **Professional Insight**: Show your thinking and expertise
- **Strong Conclusion**: End with confidence and relevance to the role

**Tone**: Professional, engaging, and appropriately detailed"""


def _compile(*patterns: str) -> tuple:
    return tuple(re.compile(p) for p in patterns)


VERY_LONG_PATTERNS = _compile(
    r"tell me about your career journey",
    r"describe your professional background",
    r"walk me through your resume",
    r"explain your long-term goals",
    r"describe your ideal work environment",
    r"tell me about your biggest achievement",
    r"describe a major project you led",
    r"explain how you would design",
    r"describe your management philosophy",
    r"tell me about your entrepreneurial",
    r"explain your vision for",
    r"describe how you would build",
    r"design a system",
    r"architect a solution",
    r"explain the entire process",
    r"walk through the complete",
    r"describe your full approach",
)

LONG_PATTERNS = _compile(
    r"tell me about a project",
    r"describe a challenging situation",
    r"walk me through",
    r"explain how you",
    r"describe your most",
    r"tell me about a time when",
    r"give me a detailed example",
    r"describe your experience",
    r"explain your process",
    r"how would you solve",
    r"describe a complex",
    r"tell me about your background",
    r"explain your career path",
    r"describe your leadership",
    r"tell me about a conflict",
    r"explain a technical",
    r"describe how you would",
    r"walk through your thought process",
)

CODING_PATTERNS = _compile(
    r"write a function",
    r"implement an algorithm",
    r"solve this problem",
    r"code this up",
    r"write some code",
    r"implement this",
    r"how would you code",
    r"write a program",
    r"coding challenge",
    r"algorithm question",
    r"data structure",
    r"big o notation",
    r"time complexity",
    r"space complexity",
)

MEDIUM_PATTERNS = _compile(
    r"tell me about yourself",
    r"describe yourself",
    r"what are your strengths",
    r"what are your weaknesses",
    r"why do you want",
    r"what interests you",
    r"what motivates you",
    r"how do you handle",
    r"what would you do",
    r"describe a time",
    r"give me an example",
    r"how would you",
    r"what's your approach",
    r"how do you deal with",
    r"what's your experience with",
    r"what do you know about",
)

SHORT_PATTERNS = _compile(
    r"^(yes|no|sure|okay|ok|alright)",
    r"how are you",
    r"nice to meet you",
    r"thank you",
    r"what's your name",
    r"where are you from",
    r"are you ready",
    r"any questions for me",
    r"do you have",
    r"can you",
    r"will you",
    r"would you like",
    r"quick question",
    r"briefly",
    r"in one word",
    r"yes or no",
    r"rate yourself",
    r"scale of",
)

FOLLOW_UP_PHRASES = (
    "follow up",
    "can you elaborate",
    "tell me more",
    "what else",
    "anything else",
    "expand on",
)

# First matching bucket wins, most specific first
LENGTH_RULES: tuple = (
    (LengthGuidance("very_long", _VERY_LONG_TEXT), VERY_LONG_PATTERNS),
    (LengthGuidance("long", _LONG_TEXT), LONG_PATTERNS),
    (LengthGuidance("coding", _CODING_TEXT), CODING_PATTERNS),
    (LengthGuidance("medium", _MEDIUM_TEXT), MEDIUM_PATTERNS),
    (LengthGuidance("short", _SHORT_TEXT), SHORT_PATTERNS),
)
FOLLOW_UP_GUIDANCE = LengthGuidance("follow_up", _FOLLOW_UP_TEXT)
STANDARD_GUIDANCE = LengthGuidance("standard", _STANDARD_TEXT)


def classify_expected_length(question: str) -> LengthGuidance:
    """Map a question to its response-length bucket. Always returns a bucket."""
    q = (question or "").lower().strip()
    for guidance, patterns in LENGTH_RULES:
        if any(p.search(q) for p in patterns):
            return guidance
    if any(phrase in q for phrase in FOLLOW_UP_PHRASES):
        return FOLLOW_UP_GUIDANCE
    return STANDARD_GUIDANCE


# --- Conversation history ---


def _recent_topics(entries: Sequence[ConversationEntry]) -> list[str]:
    topics: list[str] = []
    for entry in entries[-3:]:
        question = entry.question.lower()
        answer = entry.aiResponse.answer.lower() if entry.aiResponse else ""
        if "yourself" in question or "background" in question:
            topics.append("personal background")
        if "experience" in question or "experience" in answer:
            topics.append("work experience")
        if "skill" in question or "skill" in answer:
            topics.append("skills and abilities")
        if "strength" in question or "weakness" in question:
            topics.append("strengths and areas for growth")
        if "project" in question or "project" in answer:
            topics.append("specific projects")
        if "challenge" in question or "challenge" in answer:
            topics.append("challenges and problem-solving")
        if "team" in question or "team" in answer:
            topics.append("teamwork and collaboration")
        if "goal" in question or "future" in question:
            topics.append("career goals and aspirations")
    return list(dict.fromkeys(topics))


def _progress_note(completed: Sequence[ConversationEntry]) -> str:
    count = len(completed)
    if count == 1:
        return (
            "**CONTEXT NOTE:** You've answered one question. The interviewer is likely diving deeper "
            "or exploring different aspects of your background. Build naturally on your introduction.\n\n"
        )
    note = (
        f"**CONTEXT NOTE:** You're {count} questions into the interview. Look for opportunities to "
        "connect current answers to previous topics, show consistency, and demonstrate how different "
        "aspects of your experience relate to each other.\n\n"
    )
    topics = _recent_topics(completed)
    if topics:
        note += (
            f"**RECENT DISCUSSION THEMES:** {', '.join(topics)}. "
            "Consider how your next answer might connect to these themes.\n\n"
        )
    return note


def build_conversation_history(entries: Sequence[ConversationEntry]) -> str:
    if not entries:
        return "## CONVERSATION HISTORY\nThis is the start of the interview. No previous questions have been asked."
    completed = [e for e in entries if e.completed]
    if not completed:
        return (
            "## CONVERSATION HISTORY\nThis is the start of the interview. "
            "No previous questions have been completed yet."
        )

    parts = ["## CONVERSATION HISTORY\nHere is what has been discussed so far in this interview:\n\n"]
    for index, entry in enumerate(completed, start=1):
        parts.append(f"### Exchange {index}:\n")
        parts.append(f'**Interviewer Asked:** "{entry.question}"\n')
        parts.append(f'**You Responded:** "{entry.aiResponse.answer}"\n')
        if index == 1:
            parts.append("*Note: This was your opening response - establish rapport and set the tone.*\n")
        parts.append("\n")
    parts.append(_progress_note(completed))
    parts.append(
        "**IMPORTANT:** Use this conversation history to:\n"
        "- Maintain consistency with previous answers\n"
        '- Reference earlier topics naturally when relevant ("As I mentioned earlier..." or '
        '"Building on what we discussed about...")\n'
        "- Show you're engaged and following the interview flow\n"
        "- Avoid repeating the same information unless specifically asked to elaborate\n"
        "- Demonstrate how different aspects of your background connect\n\n"
    )
    return "".join(parts)


# --- Resume context ---


def _span(item: dict) -> str:
    start, end = item.get("timeStart") or "", item.get("timeEnd") or ""
    if start and end:
        return f"{start} - {end}"
    return start or end


def build_resume_context(resume: Optional[dict[str, Any]], position: str = "") -> str:
    """Render a resume (API wire format) as a plain-text candidate profile."""
    if not resume:
        return f"No resume data available. Please respond based on general qualifications for the {position} role."

    lines: list[str] = []
    details = resume.get("personalDetails") or {}
    if details:
        if details.get("name"):
            lines.append(f"CANDIDATE NAME: {details['name']}")
        if details.get("email"):
            lines.append(f"Email: {details['email']}")
        if details.get("phone"):
            lines.append(f"Phone: {details['phone']}")
        if details.get("address"):
            lines.append(f"Location: {details['address']}")
        lines.append("")

    if resume.get("introduction"):
        lines += ["PROFESSIONAL SUMMARY:", resume["introduction"], ""]

    experience = resume.get("experience") or []
    if experience:
        lines.append("WORK EXPERIENCE:")
        for i, exp in enumerate(experience, start=1):
            lines.append(f"{i}. {exp.get('position') or 'Position'} at {exp.get('company') or 'Company'}")
            if _span(exp):
                lines.append(f"   Duration: {_span(exp)}")
            if exp.get("location"):
                lines.append(f"   Location: {exp['location']}")
            if exp.get("description"):
                lines.append(f"   {exp['description']}")
            achievements = exp.get("achievements") or []
            if achievements:
                lines.append("   Key Achievements:")
                lines += [f"   • {a}" for a in achievements]
            lines.append("")

    if resume.get("skills"):
        lines += [f"TECHNICAL SKILLS: {', '.join(resume['skills'])}", ""]

    education = resume.get("education") or []
    if education:
        lines.append("EDUCATION:")
        for i, edu in enumerate(education, start=1):
            line = f"{i}. {edu.get('degree') or 'Degree'} from {edu.get('school') or 'Institution'}"
            if _span(edu):
                line += f" ({_span(edu)})"
            lines.append(line)
        lines.append("")

    certifications = resume.get("certifications") or []
    if certifications:
        lines.append("CERTIFICATIONS:")
        for cert in certifications:
            line = f"• {cert.get('name', '')}"
            if cert.get("issuer"):
                line += f" - {cert['issuer']}"
            if cert.get("date"):
                line += f" ({cert['date']})"
            lines.append(line)
        lines.append("")

    projects = resume.get("projects") or []
    if projects:
        lines.append("KEY PROJECTS:")
        for i, project in enumerate(projects, start=1):
            lines.append(f"{i}. {project.get('name') or 'Project'}")
            if project.get("description"):
                lines.append(f"   {project['description']}")
            if project.get("technologies"):
                lines.append(f"   Technologies: {project['technologies']}")
            if project.get("url"):
                lines.append(f"   URL: {project['url']}")
            lines.append("")

    if resume.get("languages"):
        lines += [f"LANGUAGES: {', '.join(resume['languages'])}", ""]

    return "\n".join(lines).strip()


# --- Contextual adjustments ---


def _mentions(text: str, *words: str) -> bool:
    return any(w in text for w in words)


def build_contextual_adjustments(question: str, conversation_length: int) -> str:
    q = (question or "").lower()
    adjustments: list[str] = []

    if conversation_length <= 0:
        adjustments.append(
            "**OPENING INTERVIEW**: This is your first response - make a strong first impression "
            "with confidence and enthusiasm."
        )
    elif conversation_length <= 3:
        adjustments.append(
            "**EARLY STAGE**: Building rapport and establishing your qualifications. "
            "Be engaging and show personality."
        )
    elif conversation_length <= 7:
        adjustments.append(
            "**MID INTERVIEW**: Deep dive phase. Provide detailed examples and demonstrate expertise thoroughly."
        )
    else:
        adjustments.append(
            "**CLOSING STAGE**: Focus on mutual fit, show genuine interest, and ask thoughtful questions."
        )

    if _mentions(q, "technical", "code", "algorithm", "system", "architecture"):
        adjustments.append(
            "**TECHNICAL QUESTION**: Balance technical accuracy with clear explanation. "
            "Use specific examples and explain your thought process."
        )
    elif _mentions(q, "team", "conflict", "leadership", "communication"):
        adjustments.append(
            "**BEHAVIORAL QUESTION**: Use the STAR method (Situation, Task, Action, Result). "
            "Focus on soft skills and interpersonal abilities."
        )

    if _mentions(q, "manage", "lead", "team"):
        adjustments.append(
            "**LEADERSHIP FOCUS**: Emphasize management philosophy, team building, and strategic thinking."
        )
    elif _mentions(q, "individual", "independent", "solo"):
        adjustments.append(
            "**INDIVIDUAL CONTRIBUTOR**: Highlight self-direction, initiative, and individual technical skills."
        )

    if _mentions(q, "complex", "challenging", "difficult"):
        adjustments.append(
            "**COMPLEX SCENARIO**: Provide extra detail on your problem-solving approach and show analytical thinking."
        )
    elif _mentions(q, "simple", "basic", "straightforward"):
        adjustments.append(
            "**STRAIGHTFORWARD QUESTION**: Keep response focused and avoid over-complicating your answer."
        )

    return "\n## CONTEXTUAL ADJUSTMENTS\n" + "\n".join(f"- {a}" for a in adjustments) + "\n"


# --- Full prompts ---


def _language_section(session: SessionConfig) -> str:
    lines = ["## LANGUAGE & STYLE", f"- Respond in {session.language or 'English'}."]
    if session.simpleEnglish:
        lines.append("- Use simple, plain English: short sentences, common words, no idioms or jargon.")
    lines.append("- Speak in the first person as the candidate, naturally and conversationally.")
    return "\n".join(lines)


def build_system_prompt(session: SessionConfig, question: str, conversation: Sequence[ConversationEntry]) -> str:
    """Compose the full system prompt for answering `question` as the candidate."""
    completed = sum(1 for e in conversation if e.completed)
    candidate = ((session.resumeData or {}).get("personalDetails") or {}).get("name") or "the candidate"

    sections = [
        "# INTERVIEW RESPONSE GENERATION",
        f'You are {candidate}, interviewing for the "{session.position}" position at "{session.company}". '
        "You are answering the interviewer live. Give the exact words the candidate should say.",
        "## CANDIDATE PROFILE\n" + build_resume_context(session.resumeData, session.position),
        build_conversation_history(conversation),
        classify_expected_length(question).text,
        build_contextual_adjustments(question, completed).strip(),
        _language_section(session),
    ]
    if session.extraInstructions and session.extraInstructions.strip():
        sections.append("## ADDITIONAL INSTRUCTIONS FROM THE CANDIDATE\n" + session.extraInstructions.strip())
    sections.append(
        "## OUTPUT RULES\n"
        "- Answer only the current question; do not invent a new one.\n"
        "- Ground every example in the candidate profile; never fabricate employers or degrees.\n"
        "- Provide only the response text without any meta-commentary or labels."
    )
    sections.append(f'## CURRENT QUESTION\n"{question}"')
    return "\n\n".join(sections)


def build_screen_analysis_prompt(session: SessionConfig) -> str:
    return f"""# CODING INTERVIEW SCREEN ANALYSIS

You are analyzing a screenshot from a coding interview screen share. The candidate is interviewing for "{session.position}" at "{session.company}".

## ANALYSIS TASK
1. **Identify the Problem**: Look for coding problems, algorithm challenges, or technical questions on the screen
2. **Understand Context**: Determine if this is from LeetCode, HackerRank, IDE, whiteboard, or other platform
3. **Provide Guidance**: Give step-by-step approach and solution hints

## YOUR RESPONSE SHOULD INCLUDE:
- **Problem Identification**: What coding problem or question is visible?
- **Solution Approach**: High-level strategy to solve this problem
- **Key Concepts**: Important algorithms, data structures, or patterns needed
- **Implementation Tips**: Specific coding guidance or pseudocode
- **Time/Space Complexity**: Expected complexity analysis
- **Edge Cases**: Important test cases to consider

## GUIDELINES:
- Be concise but comprehensive
- Focus on approach rather than complete solution
- Help the candidate think through the problem systematically
- Consider the interview context and role level
- If no clear problem is visible, describe what you can see and suggest next steps

Analyze the screenshot and provide helpful coding interview guidance."""
