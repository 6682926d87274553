#!/usr/bin/env python
"""
Download the spaCy model used for optional lemmatization.
Run this script once before enabling normalization.use_lemmatization.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def configured_model():
    """spaCy model named in config.yaml, or the default."""
    from nl2gherkin.config import load_config
    try:
        return load_config().normalization.spacy_model
    except FileNotFoundError:
        return "en_core_web_sm"


def download_spacy_model(model_name):
    """Download a spaCy pipeline if it is not installed yet."""
    print("=" * 50)
    print(f"Downloading spaCy model: {model_name}")
    print("=" * 50)

    try:
        import spacy
        try:
            spacy.load(model_name)
            print("✅ Model already downloaded!")
        except OSError:
            print(f"Downloading {model_name}...")
            os.system(f"{sys.executable} -m spacy download {model_name}")
            spacy.load(model_name)
            print("✅ Downloaded successfully!")
    except (ImportError, OSError) as e:
        print(f"❌ Error: {e}")
        return False
    return True


def main():
    model_name = sys.argv[1] if len(sys.argv) > 1 else configured_model()
    success = download_spacy_model(model_name)

    print("")
    if success:
        print("🎉 Model ready. Set normalization.use_lemmatization: true to use it.")
    else:
        print("⚠️ Download failed. Please check errors above.")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
