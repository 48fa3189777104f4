"""Prompt templates used by the chat agent."""

RAG_SYSTEM_PROMPT = """\
Answer strictly from the PDF context.
If the information does not exist in the documents,
reply with: "I don't know based on the available documents."
"""

# Appended to the user question when retrieval is enabled.
RAG_CONTEXT_TEMPLATE = """\
{question}

Context information is below, surrounded by ---------------------

---------------------
{context}
---------------------

Given the context and provided history information and not prior knowledge,
reply to the user comment. If the answer is not in the context, inform
the user that you can't answer the question.
"""

RESUME_ANALYSIS_TEMPLATE = """\
Analyze the following resume:

{resume}

Return strict JSON with:
- skills: extracted skills list
- rating: score from 1-10
- improvements: list of 3 suggestions
"""

ATS_CHECK_TEMPLATE = """\
You are an ATS expert. Compare the resume with the job description.

Resume:
{resume}

Job Description:
{job_description}

Return STRICT JSON with:
- atsScore (0-100)
- matchedKeywords (list)
- missingKeywords (list)
- summary (short paragraph)
"""
