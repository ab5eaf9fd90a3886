class CompanyNotFoundError(Exception):
    def __init__(self, company_id: str):
        self.company_id = company_id
        self.message = "Company not found"
        super().__init__(f"Company {company_id} not found")


class MissingWebsiteError(Exception):
    def __init__(self, company_id: str):
        self.company_id = company_id
        self.message = "Website fehlt. Bitte zuerst Website hinterlegen."
        super().__init__(self.message)


class FetchError(Exception):
    def __init__(self, message: str, url: str, status_code: int | None = None):
        self.message = message
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class PipelineError(Exception):
    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)
