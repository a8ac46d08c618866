"""
Prompt templates for the coaching model operations.

This module contains all the prompt templates used by the coaching flows,
keeping them separate from the business logic for easier maintenance and editing.
"""
from typing import Optional

from ..config import MAX_GENERATED_QUESTIONS
from .schemas import CRITERIA_BY_CATEGORY


ANALYSIS_OUTPUT_SCHEMA = """
{
  "metadata": {
    "wordCount": <int>,
    "fillerWordCount": <int>,
    "speechRateWPM": <number>,
    "averagePauseDurationMs": <number>,
    "pitchVariance": <number>,
    "audioDurationSeconds": <number, only when audio was provided>,
    "paceScore": <0-100, ideal pace is 140-160 WPM>,
    "clarityScore": <0-100>,
    "pausePercentage": <0-100>
  },
  "highlightedTranscription": [{"text": "<word, filler or pause>", "type": "default|filler|pause"}],
  "evaluationCriteria": [
    {"category": "Delivery|Language|Content", "criteria": "<criterion name>", "score": <0-10>,
     "evaluation": "<brief assessment>", "comparison": "<only when a perfect answer is given>",
     "feedback": "<actionable suggestion>"}
  ],
  "totalScore": <0-100>,
  "overallAssessment": "<overall assessment>",
  "suggestedSpeech": "<how the message could have been delivered more effectively>"
}
""".strip()

RESUME_OUTPUT_SCHEMA = """
{
  "name": "<string>",
  "contact": {"email": "<string>", "phone": "<string>", "linkedin": "<string>", "website": "<string>"},
  "summary": "<string>",
  "experience": [{"jobTitle": "<string>", "company": "<string>", "location": "<string>",
                  "startDate": "<string>", "endDate": "<string>", "responsibilities": ["<string>"]}],
  "education": [{"institution": "<string>", "degree": "<string>", "major": "<string>", "graduationDate": "<string>"}],
  "skills": ["<string>"],
  "projects": [{"name": "<string>", "description": "<string>", "technologies": ["<string>"]}],
  "certifications": ["<string>"]
}
""".strip()


def _criteria_instructions() -> str:
    lines = []
    for category, criteria in CRITERIA_BY_CATEGORY.items():
        names = ", ".join(c.value for c in criteria)
        lines.append(f"- **{category.value} Criteria**: {names}. Assign the category '{category.value}' to these.")
    return "\n".join(lines)


class CoachingPrompts:
    """Collection of all coaching prompts."""

    @staticmethod
    def analyze_speech(mode: str,
                       is_audio: bool,
                       speech_text: Optional[str] = None,
                       question: Optional[str] = None,
                       perfect_answer: Optional[str] = None) -> str:
        """Prompt for scoring a speech sample; audio travels as a media part."""
        if perfect_answer:
            role = (
                "You are a professional exam evaluator. Your task is to evaluate the candidate's answer "
                "compared to the perfect answer based on the following 15 criteria. For each criterion, you must provide:\n"
                "- **Evaluation:** A brief assessment of the candidate's performance on that criterion.\n"
                "- **Comparison:** A detailed analysis of how the candidate's answer compares with the perfect answer for that criterion.\n"
                "- **Feedback:** Specific, actionable suggestions for improvement."
            )
        else:
            role = ("You are a professional speech coach. Your task is to analyze a speech sample "
                    "and provide constructive feedback.")

        if is_audio:
            sample = ("The speech sample is the attached audio. You MUST first transcribe the audio into text, "
                      "then use that transcription for the analysis below.")
        else:
            sample = f"Speech Sample (Candidate's Answer):\n{speech_text}"

        context = [f"Context: {mode}"]
        if question:
            context.append(f"Question: {question}")
        if perfect_answer:
            context.append(f"Perfect Answer: {perfect_answer}")

        comparison_rule = (
            "- For each criterion, you MUST also provide a 'comparison' of the candidate's answer to the perfect answer.\n"
            if perfect_answer else ""
        )

        return f"""
{role}

{sample}

{chr(10).join(context)}

Return your answer as a valid JSON object following this schema exactly (do not include any extra text):
{ANALYSIS_OUTPUT_SCHEMA}

Follow these instructions when generating the JSON:
- Evaluate the speech sample on ALL 15 of the following criteria.
{_criteria_instructions()}
- For each of the 15 criteria, provide a score from 0-10, an evaluation, and actionable feedback.
{comparison_rule}- The totalScore is from 0 to 100, and should evaluate the speech sample and context as a whole.
- The wordCount, fillerWordCount, speechRateWPM, averagePauseDurationMs, and pitchVariance should be calculated or estimated from the transcription.
- The paceScore and clarityScore should be scores from 0-100 based on the analysis.
- The pausePercentage should be the estimated percentage of total time the speaker was pausing.
- **highlightedTranscription**: You must segment the entire transcription. Create a segment for every single word or pause. A 'filler' type is ONLY for a single filler word (e.g., um, uh, ah, like). A 'pause' type is for significant silences written as '[PAUSE: 1.2s]'. All other words are 'default'. Concatenating all 'text' fields MUST reconstruct the full transcription with pause annotations. Do not leave this field empty.
        """.strip()

    @staticmethod
    def extract_resume_info() -> str:
        """Prompt for structured resume extraction; the resume is a media part."""
        return f"""
You are an expert resume parser. Your task is to analyze the attached resume file and extract key information into a structured JSON format.

Instructions:
1. Thoroughly read the attached resume file.
2. Identify and extract: name, contact (email, phone, etc.), summary, experience (job title, company, dates, responsibilities), education (institution, degree, graduation date), skills, projects, and certifications.
3. If a section or piece of information is not present in the resume, you MUST omit the corresponding field from the JSON output entirely. Do not include empty arrays or null values for missing sections.

JSON Output Schema:
{RESUME_OUTPUT_SCHEMA}
        """.strip()

    @staticmethod
    def extract_text_from_file() -> str:
        """Prompt for plain-text extraction; the file is a media part."""
        return """
You are an expert file parser. Your sole task is to extract all the plain text content from the attached file.

Instructions:
1. Thoroughly read the attached file.
2. Extract every piece of text you can find.
3. Do not add any summaries, explanations, or formatting.
4. Return a JSON object of the form {"text": "<full extracted text>"}.
        """.strip()

    @staticmethod
    def generate_questions_from_resume(resume_summary: str, resume_text: str,
                                       count: int = MAX_GENERATED_QUESTIONS) -> str:
        """Prompt for tailored interview questions with first-person ideal answers."""
        return f"""
You are an expert career coach and hiring manager. Your task is to analyze the provided resume and generate interview questions and answers to help a candidate prepare.

Instructions:
1. First, analyze the resume summary to understand the candidate's key qualifications:
   Resume Summary:
   {resume_summary}
2. Next, use the FULL resume text provided below to find specific details to craft the answers.
3. Generate exactly {count} common but important interview questions based on the summary. One of the questions MUST be "Tell me about yourself".
4. For EACH question, craft a complete, detailed, and ideal answer using the FULL RESUME TEXT.
5. The answer MUST be written from the candidate's perspective (first-person "I") as if they were speaking it aloud.
6. The answer's content must come exclusively from the resume text. Do not invent skills, experiences, or details, and do not use placeholders like [University Name].

Full Resume Text:
{resume_text}

Return a JSON object of the form {{"questions": [{{"question": "<question>", "answer": "<ideal answer>"}}]}}.
        """.strip()

    @staticmethod
    def summarize_speech(speech_text: str) -> str:
        """Prompt for a concise summary of the speech's main points."""
        return f"""
You are an expert speech summarizer. Please provide a concise summary of the following speech:

{speech_text}

Return a JSON object of the form {{"summary": "<summary>"}}.
        """.strip()
