from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "crmgen"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    database_url: str = "sqlite:///./crmgen.db"
    run_migrations_on_startup: bool = True

    # Standalone generator output and the host backend that api-generator records patch
    generator_output_dir: str = "./output"
    api_output_dir: str = "./generated_api"

    auth_required: bool = True

    admin_username: str = "admin"
    admin_email: str = "admin@example.com"
    admin_password: str | None = None
    admin_phone: str | None = None

settings = Settings()
