from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    CLOUDINARY_API_SECRET:str = ""
    CLOUDINARY_API_KEY :str = ""
    CLOUDINARY_CLOUD_NAME :str = ""

    # chat images land under <folder>/<order_id>/messages/<message_id>
    CHAT_IMAGE_FOLDER: str = "orders"

    class Config:
        env_file = ".env"
        extra="ignore"

media_settings = Settings()
