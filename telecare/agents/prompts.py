"""Prompt templates and fixed patient-facing text for the triage pipeline."""

# ============================================================================
# FIXED MESSAGES
# ============================================================================

OUT_OF_SCOPE_MESSAGE = (
    "This question is outside my medical scope. "
    "Please ask about health symptoms, conditions, or care."
)

PRESCRIPTION_DISCLAIMER = (
    "This is an AI-generated recommendation for informational purposes only."
)

# Headings every prescription must carry, live or template.
PRESCRIPTION_HEADINGS = (
    "DIAGNOSIS:",
    "MEDICATIONS:",
    "RECOMMENDATIONS",
    "AVOID",
    "WARNINGS:",
    "FOLLOW-UP:",
    "DISCLAIMER:",
)

ADVICE_HEADINGS = ("Assessment", "Self-care", "Red flags", "Next steps")

NO_DATASET_GUIDANCE = "(No dataset guidance found)"

# ============================================================================
# ADVICE PROMPT
# ============================================================================

ADVICE_PROMPT = """You are responding as a licensed clinician. A patient reports: "{query}".

STRICT RESPONSE REQUIREMENTS:
- Provide only clinically relevant information. Do not include any non-medical content, metadata, sources, or system notes.
- Do not diagnose or claim certainty. Use non-diagnostic language ("may be consistent with", "could be due to").
- Be concise, empathetic, and actionable.
- Structure the response with these headings only: {headings}.
- Keep within {char_budget} characters total.

KNOWLEDGE BASE (use as guidance if relevant; do not quote verbatim):
{knowledge_base}

OUT-OF-SCOPE HANDLING:
If the patient's message is not about health, symptoms, conditions, risks, or medical self-care, respond EXACTLY with: "{out_of_scope}" and nothing else.

Now write the response."""

# ============================================================================
# PRESCRIPTION PROMPT
# ============================================================================

PRESCRIPTION_PROMPT = """You are a licensed medical professional generating a structured prescription.

PATIENT INFORMATION:
- Symptoms: {symptoms}
- Age: {age}
- Weight: {weight}
- Known Allergies: {allergies}
- Current Medications: {medications}
- Condition Complexity: {complexity}
- Recommended Specialization: {specialization}

REQUIRED OUTPUT FORMAT:
Generate a medical prescription in EXACTLY this format:

PRESCRIPTION RECOMMENDATION
Generated: {date}

DIAGNOSIS: [Provide a professional medical assessment based on the symptoms]

MEDICATIONS:
• [Drug Name]: [Dosage & Duration]
  Instructions: [Specific instructions for taking the medication]

RECOMMENDATIONS (Self-care DOs):
• [What the patient SHOULD do 1]
• [What the patient SHOULD do 2]
• [What the patient SHOULD do 3]

AVOID (DON'Ts):
• [What the patient should AVOID 1]
• [What the patient should AVOID 2]

WARNINGS:
• [Important warning or red flag 1]
• [Important warning or red flag 2]

FOLLOW-UP:
• [When to revisit or consult doctor]

DISCLAIMER:
{disclaimer}

IMPORTANT GUIDELINES:
1. Be clinically accurate and evidence-based
2. Consider patient's age, weight, allergies, and current medications
3. For complex conditions, emphasize the need for specialist consultation
4. Include appropriate warnings and red flags
5. Provide practical, actionable recommendations including clear DOs and DON'Ts
6. Use professional medical terminology
7. Keep medications appropriate for the condition described
8. Always include the disclaimer

Generate the prescription now:"""

PRESCRIPTION_FALLBACK_TEMPLATE = """PRESCRIPTION RECOMMENDATION
Generated: {date}

DIAGNOSIS: Based on the symptoms described ({symptoms}), this appears to be a condition requiring medical evaluation.

MEDICATIONS:
• Symptom Management: As directed by healthcare provider
  Instructions: Follow dosage instructions carefully

RECOMMENDATIONS (Self-care DOs):
• Rest and maintain adequate hydration
• Monitor symptoms closely

AVOID (DON'Ts):
• Avoid self-medication without professional guidance

WARNINGS:
• Seek immediate medical attention if symptoms worsen
• Consult healthcare provider for proper diagnosis and treatment

FOLLOW-UP:
• Schedule appointment with healthcare provider within 24-48 hours

DISCLAIMER:
{disclaimer}"""

# ============================================================================
# CLASSIFIER AND COMPOSER MESSAGES
# ============================================================================

BASIC_CLASSIFICATION_MESSAGE = (
    "Based on your description, this appears to be a common condition that can "
    "usually be managed with rest, fluids and self-care. Monitor your symptoms, "
    "and consult a healthcare provider if they worsen or do not improve within a few days."
)

COMPLEX_CLASSIFICATION_MESSAGE = (
    "Your symptoms may need professional medical attention{concern}. "
    "I recommend consulting a {specialization} as soon as possible."
)

COMPLEX_NO_DOCTOR_SUFFIX = (
    " No {specialization} is currently listed in our directory, so please "
    "visit your nearest clinic or hospital."
)

URGENT_CARE_SUFFIX = (
    " If symptoms are severe or rapidly getting worse, seek emergency care immediately."
)

DOCTOR_RECOMMENDATION = (
    "\n\n**Doctor Recommendation:** Based on your symptoms, I recommend consulting "
    "with a {specialization}. Here are some available doctors:"
)

SUGGESTED_MEDICINES = "\n\n**Suggested Medicines (from dataset) for {condition}:** {medicines}"

CHAT_FAILURE_MESSAGE = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again or consult a healthcare provider directly."
)

PRESCRIPTION_FAILURE_MESSAGE = "Failed to generate prescription. Please try again."

ADVICE_FAILURE_MESSAGE = "Failed to generate advice. Please try again."
