"""
Shadowbinder package.

Provides:
- A FastAPI endpoint forwarding text prompts to Google Gemini
- A form client that submits prompts to the endpoint and renders results
"""
