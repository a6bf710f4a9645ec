from __future__ import annotations

SUGGESTION_TOPICS = """
Provide detailed suggestions for:
1. Keywords to include
2. Skills to highlight
3. Experience formatting
4. ATS optimization
5. Industry-specific recommendations
6. Action verbs to use
7. Quantifiable achievements examples
8. Section organization

Format as a comprehensive guide with clear sections and bullet points.
""".strip()

RESUME_WITH_JOB_PROMPT = """
You are a resume optimization assistant. Analyze the following resume against the job description and provide comprehensive suggestions for improvement.

Resume Content:
{resume_content}

Job Title: {job_title}
Company: {company_name}
Job Description:
{job_description}

{topics}
""".strip()

JOB_ONLY_PROMPT = """
You are a resume optimization assistant. Analyze the following job description and provide comprehensive suggestions for creating an optimized resume.

Job Title: {job_title}
Company: {company_name}
Job Description:
{job_description}

{topics}
""".strip()

JOB_ONLY_SYSTEM_PROMPT = (
    "You are a resume optimization assistant. Analyze the job description and provide comprehensive "
    "resume optimization suggestions. Respond with detailed, actionable advice formatted as a "
    "comprehensive guide."
)

JSON_ENVELOPE_SYSTEM_PROMPT = """
You are a resume optimization assistant.
Respond ONLY in this exact JSON format and ensure it is a single flat object:

{{
  "selected_job_id": "{selected_job_id}",
  "request_id": "{request_id}",
  "type": "resume",
  "status": "success",
  "content": "<<< FULL resume improvement suggestions as a formatted string >>>",
  "processing_time": 30,
  "metadata": {{
    "keywords_found": [...],
    "ats_score": 90,
    "suggestions_count": 10
  }}
}}

Important:
- The value of 'content' must be a full string (not an object).
- Use bullet points and headings inside the string.
- Never return content as a nested object.
""".strip()

JSON_ENVELOPE_USER_PROMPT = """
I want resume suggestions for this job:

Job Title: {job_title}
Company: {company_name}
Job Description:
{job_description}

Current Resume Content:
{resume_content}

Instructions:
- Return the response in the JSON format provided above.
- Place all optimization suggestions inside the 'content' field as a nicely formatted string.
- Use bullet points, subheadings, and clearly separate each section: keywords, summary, skills, experience, ATS tips, company insights, checklist.
- Replace 'request_id' with this: {request_id}
- Replace 'selected_job_id' with this: {selected_job_id}
""".strip()

COVER_LETTER_SYSTEM_PROMPT = (
    "You write tailored, truthful cover letters. Return only the letter text, "
    "with no commentary before or after it."
)

COVER_LETTER_PROMPT = """
Write a cover letter in a {tone} tone.

Company: {company_name}
Job Title: {job_title}
Hiring Manager: {hiring_manager}
Job Description:
{job_description}

Relevant personal experience:
{personal_experience}

Why this company:
{why_company}

Address the hiring manager by name when one is given, otherwise use "Dear Hiring Team".
Keep it under 400 words.
""".strip()
