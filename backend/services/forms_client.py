from typing import List

from googleapiclient.discovery import build

from models import FormAnswer, FormResponse, GoogleForm


def get_forms_service(creds):
    return build("forms", "v1", credentials=creds, cache_discovery=False)


def create_form(creds, title: str) -> GoogleForm:
    form = get_forms_service(creds).forms().create(
        body={"info": {"title": title, "documentTitle": title}}
    ).execute()

    form_id = form.get("formId", "")
    info = form.get("info", {})
    return GoogleForm(
        form_id=form_id,
        title=info.get("title") or title,
        document_title=info.get("documentTitle") or title,
        responder_uri=form.get("responderUri", ""),
        form_uri=f"https://docs.google.com/forms/d/{form_id}/edit",
    )


def list_responses(creds, form_id: str, limit: int = None) -> List[FormResponse]:
    response = get_forms_service(creds).forms().responses().list(formId=form_id).execute()

    results = []
    for item in response.get("responses", []):
        answers = [
            FormAnswer(
                question_id=question_id,
                text_answers=[a.get("value", "") for a in answer.get("textAnswers", {}).get("answers", [])],
            )
            for question_id, answer in item.get("answers", {}).items()
        ]
        results.append(FormResponse(
            response_id=item.get("responseId", ""),
            create_time=item.get("createTime", ""),
            last_submitted_time=item.get("lastSubmittedTime", ""),
            respondent_email=item.get("respondentEmail"),
            answers=answers,
        ))

    return results[:limit] if limit else results
