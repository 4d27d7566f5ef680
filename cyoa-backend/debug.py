from typing import List, Optional

from config import StoryConfig


def diagnose(config: StoryConfig) -> List[str]:
    key = config.api_key
    report = []

    if not key:
        report.append("❌ FAILURE: Python cannot find 'OPENAI_API_KEY'.")
        report.append("Check: Did you name the file '.env' exactly? Is it in the same folder?")
    elif key.startswith("gsk_"):
        report.append("✅ SUCCESS: Groq key found!")
        if not config.base_url:
            report.append("⚠️ WARNING: Groq keys need OPENAI_BASE_URL=https://api.groq.com/openai/v1")
        report.append(f"Key loaded: {key[:10]}... (hidden)")
    elif not key.startswith("sk-"):
        report.append(f"⚠️ WARNING: Your key looks weird. It starts with '{key[:4]}...'")
        report.append("OpenAI keys normally start with 'sk-'. Check for typos.")
    else:
        report.append("✅ SUCCESS: Key found!")
        report.append(f"Key loaded: {key[:10]}... (hidden)")

    report.append(f"Model: {config.model}")
    return report


def main(env_file: Optional[str] = None) -> None:
    print("\n--- DIAGNOSTIC REPORT ---")
    for line in diagnose(StoryConfig.from_env(env_file, override=True)):
        print(line)
    print("-------------------------\n")


if __name__ == "__main__":
    main()
