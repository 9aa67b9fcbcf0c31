from locust import HttpUser, task, between
import uuid

class LabUser(HttpUser):
    wait_time = between(1, 3)

    def on_start(self):
        self.biochar_numbers = []

    @task(3)
    def list_biochar(self):
        self.client.get("/api/biochar/", params={"sort_by": "chronological"})

    @task(2)
    def parse_objective(self):
        text = "Objective: bench\nResult: ok\nConclusion: none"
        self.client.post("/api/objectives/parse", json={"text": text})

    @task(1)
    def create_biochar(self):
        number = f"BENCH-{uuid.uuid4().hex[:10]}"
        r = self.client.post("/api/biochar/", json={"experiment_number": number, "reactor": "R1"})
        if r.status_code == 201:
            self.biochar_numbers.append(number)

    @task(1)
    def list_graphene_for_biochar(self):
        if self.biochar_numbers:
            self.client.get(
                f"/api/graphene/by-biochar/{self.biochar_numbers[-1]}",
                name="/api/graphene/by-biochar/[number]",
            )
