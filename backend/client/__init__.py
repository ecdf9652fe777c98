from client.api_client import ApiError, CollegeApiClient


__all__ = ["ApiError", "CollegeApiClient"]
