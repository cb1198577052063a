"""
LinkedIn profile optimization prompt
"""

from primoboost.models.linkedin import ProfileOptimizationForm


class LinkedInPrompts:
    """Prompt for rewriting a LinkedIn profile for recruiter search."""

    RESPONSE_SHAPE = """{
  "headline": {
    "optimized": "string (max 220 characters, include role, value prop, keywords)",
    "explanation": "string (why this headline is effective)"
  },
  "about": {
    "optimized": "string (compelling about section with clear structure, 300-600 chars)",
    "explanation": "string (what makes this about section strong)"
  },
  "experience": {
    "optimized": "string (3-5 bullet points with action verbs, metrics, and impact)",
    "explanation": "string (how these bullets demonstrate value)"
  },
  "skills": {
    "optimized": ["skill1", "skill2", "skill3", "skill4", "skill5", "skill6", "skill7", "skill8", "skill9", "skill10"],
    "explanation": "string (why these skills matter for the role)"
  },
  "achievements": {
    "optimized": ["achievement1", "achievement2", "achievement3", "achievement4"],
    "explanation": "string (how achievements differentiate the candidate)"
  },
  "overallScore": number (1-100, profile optimization score),
  "keyImprovements": ["improvement1", "improvement2", "improvement3", "improvement4", "improvement5"]
}"""

    def optimize_profile_prompt(self, form: ProfileOptimizationForm) -> str:
        return f"""You are a LinkedIn profile optimization expert with deep knowledge of recruiter search algorithms, ATS systems, and professional branding.

PROFILE TO OPTIMIZE:
Target Role: {form.target_role}
Industry: {form.industry}
Seniority Level: {form.seniority_level.value}
Desired Tone: {form.tone.value}

Current Headline: {form.headline or 'Not provided'}
Current About Section: {form.about or 'Not provided'}
Experience Details: {form.experience or 'Not provided'}
Skills: {form.skills or 'Not provided'}
Achievements: {form.achievements or 'Not provided'}

TASK: Optimize this LinkedIn profile to maximize visibility, engagement, and recruiter interest.

Provide optimization suggestions in the following JSON format:

{self.RESPONSE_SHAPE}

OPTIMIZATION GUIDELINES:
1. Headline: Include role + industry keywords + unique value proposition
2. About: Use storytelling, quantify impact, include a call to action
3. Experience: Start with strong action verbs, quantify results with %, $, or numbers
4. Skills: Mix hard skills (technical) and soft skills (leadership, communication)
5. Achievements: Highlight awards, recognitions, and measurable wins
6. Use keywords that recruiters search for in {form.industry}
7. Tone should be {form.tone.value}
8. Optimize for {form.seniority_level.value} level positioning

Respond ONLY with valid JSON. No markdown, no code blocks, just the JSON object."""
