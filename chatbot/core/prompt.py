SYSTEM_PROMPT = (
    "You are a helpful assistant. Use the context below to inform your response.\n\n"
    "Summary of the conversation so far:\n{summary}"
)
