#!/usr/bin/env python
"""
Verify Setup Script
Checks dependencies, configuration and step definition sources.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def check_python_version():
    """Check Python version."""
    print("[1/6] Checking Python version...")
    version = sys.version_info
    if version.major < 3 or (version.major == 3 and version.minor < 9):
        print(f"  ❌ Python 3.9+ required, found {version.major}.{version.minor}")
        return False
    print(f"  ✅ Python {version.major}.{version.minor}.{version.micro}")
    return True


def check_dependencies():
    """Check required Python packages."""
    print("\n[2/6] Checking Python dependencies...")
    required = ['yaml', 'tqdm', 'numpy', 'spacy', 'openai']

    all_ok = True
    for package in required:
        try:
            __import__(package)
            print(f"  ✅ {package}")
        except ImportError:
            print(f"  ❌ {package} not installed")
            all_ok = False

    return all_ok


def check_config():
    """Check configuration file."""
    print("\n[3/6] Checking configuration...")
    try:
        from nl2gherkin.config import load_config
        config = load_config()
        print("  ✅ config.yaml loaded")
        print(f"     - Step sources: {', '.join(config.step_definitions.paths)}")
        print(f"     - Features dir: {config.output.features_dir}")
        print(f"     - Completion model: {config.completion.model}")
        return config
    except FileNotFoundError:
        print("  ❌ config.yaml not found")
        return None
    except (ValueError, TypeError, AttributeError) as e:
        print(f"  ❌ Failed to load config: {e}")
        return None


def check_spacy_model(config):
    """Check the spaCy model when lemmatization is enabled."""
    print("\n[4/6] Checking spaCy model...")
    if config is None:
        print("  ❌ Skipped (no configuration)")
        return False
    if not config.normalization.use_lemmatization:
        print("  ✅ Lemmatization disabled, model not required")
        return True

    model_name = config.normalization.spacy_model
    try:
        import spacy
        spacy.load(model_name)
        print(f"  ✅ {model_name} loaded")
        return True
    except (ImportError, OSError) as e:
        print(f"  ❌ Failed to load spaCy model: {e}")
        print("  Run: python scripts/download_models.py")
        return False


def check_step_catalog(config):
    """Check that step definitions can be loaded."""
    print("\n[5/6] Checking step definitions...")
    if config is None:
        print("  ❌ Skipped (no configuration)")
        return False
    try:
        from nl2gherkin.catalog import StepCatalog
        from nl2gherkin.errors import CatalogLoadError
        catalog = StepCatalog.load(config.step_definitions.paths, config.step_definitions.file_patterns)
    except CatalogLoadError as e:
        print(f"  ❌ {e}")
        return False

    if len(catalog) == 0:
        print("  ⚠️  No step definitions found; every step will need a stub")
    else:
        print(f"  ✅ {len(catalog)} step definitions loaded")
    return True


def check_api_key(config):
    """Check the completion API key is present."""
    print("\n[6/6] Checking completion API key...")
    env_name = config.completion.api_key_env if config else "OPENAI_API_KEY"
    if os.environ.get(env_name):
        print(f"  ✅ {env_name} is set")
        return True
    print(f"  ❌ {env_name} is not set (needed only for the LLM fallback)")
    return False


def main():
    """Run all checks."""
    print("=" * 50)
    print("Setup Verification")
    print("=" * 50)

    results = []
    results.append(("Python Version", check_python_version()))
    results.append(("Dependencies", check_dependencies()))
    config = check_config()
    results.append(("Configuration", config is not None))
    results.append(("spaCy Model", check_spacy_model(config)))
    results.append(("Step Definitions", check_step_catalog(config)))
    results.append(("API Key", check_api_key(config)))

    print("\n" + "=" * 50)
    print("Summary")
    print("=" * 50)

    all_passed = True
    for name, passed in results:
        status = "✅" if passed else "❌"
        print(f"  {status} {name}")
        if not passed:
            all_passed = False

    print("")
    if all_passed:
        print("🎉 All checks passed! System is ready to use.")
        print("\nNext step:")
        print("  python main.py -d \"go to the login page and verify the title\"")
        return 0
    else:
        print("⚠️  Some checks failed. Please fix the issues above.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
