import pandas as pd
from sklearn.datasets import load_iris

from tunerf import Task, estimate_time_tune_rf, restart_tune_rf, tune_rf
from tunerf.errors import TunerError

print("BUILD IRIS CLASSIFICATION TASK...")
iris = load_iris(as_frame=True)
task = Task.classification(iris.data, pd.Series(iris.target_names[iris.target]))

print("ESTIMATE TUNING DURATION...")
estimate_time_tune_rf(task, iters=70, num_trees=1000)

print("TUNE MTRY, MIN.NODE.SIZE AND SAMPLE.FRACTION...")
try:
    result = tune_rf(
        task,
        iters=70,
        num_trees=1000,
        save_file_path="data/optpath_iris.pkl",
    )
except TunerError as exc:
    print(f"Tuning stopped: {exc}")
    print("CONTINUE FROM CHECKPOINT...")
    result = restart_tune_rf("data/optpath_iris.pkl", task=task)

print("SAVE RESULTS...")
result.results.to_csv("data/tune_rf_iris_results.csv", index=False)
result.recommended_parameters.to_csv(
    "data/tune_rf_iris_recommended.csv", index=False
)

print("DONE.")
